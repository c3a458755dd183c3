"""
Settings loading and service wiring
"""
import asyncio
import pytest
from pathlib import Path
from pydantic import ValidationError

from pos_ledger.bootstrap import create_services
from pos_ledger.config import ENV_VARS, Settings, configure_logging, get_settings
from pos_ledger.models import PaymentMethod


@pytest.fixture
def clean_env(monkeypatch):
    for env_var in ENV_VARS.values():
        monkeypatch.delenv(env_var, raising=False)
    return monkeypatch


class TestSettings:

    def test_defaults(self, clean_env, tmp_path):
        settings = get_settings(env_file=tmp_path / "missing.env")
        assert settings.ledger_path == Path("data/transactions.json")
        assert settings.receipt_output_dir == Path("receipts")
        assert settings.store_name == "Shake-Stack Petrol"
        assert settings.store_address_lines == ["2808 W.Broadway", "Vancouver", "British Columbia", "V6K2G7"]
        assert settings.log_level == "INFO"

    def test_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("POS_STORE_NAME=Corner Fuel\nPOS_STORE_ADDRESS=1 Main St|Burnaby\nPOS_LOG_LEVEL=debug\n")
        settings = get_settings(env_file=env_file)
        assert settings.store_name == "Corner Fuel"
        assert settings.store_address_lines == ["1 Main St", "Burnaby"]
        assert settings.log_level == "DEBUG"

    def test_environment_overrides_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("POS_STORE_NAME=From File\n")
        clean_env.setenv("POS_STORE_NAME", "From Environment")
        clean_env.setenv("POS_LEDGER_PATH", str(tmp_path / "ledger.json"))
        settings = get_settings(env_file=env_file)
        assert settings.store_name == "From Environment"
        assert settings.ledger_path == tmp_path / "ledger.json"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    def test_configure_logging_accepts_settings(self):
        # basicConfig is a no-op once handlers exist; both forms must still run
        configure_logging(Settings(log_level="WARNING"))
        configure_logging()


class TestCreateServices:

    def test_wires_working_services(self, tmp_path, chips):
        settings = Settings(
            ledger_path=tmp_path / "data" / "transactions.json",
            receipt_output_dir=tmp_path / "receipts",
            store_name="Corner Fuel"
        )
        services = create_services(settings)
        assert services.settings is settings
        assert services.transaction_service.store is services.store

        result = asyncio.run(services.transaction_service.create_transaction(
            PaymentMethod.CASH, "2.50", "5.00", [chips]
        ))
        assert result.transaction_number == 1

        path = asyncio.run(services.receipt_service.print_receipt(1))
        assert path.parent == tmp_path / "receipts"
        assert "THANK YOU FOR SHOPPING AT CORNER FUEL" in path.read_text(encoding="utf-8")

    def test_continues_existing_ledger(self, tmp_path, chips):
        settings = Settings(ledger_path=tmp_path / "ledger.json", receipt_output_dir=tmp_path / "r")
        first = create_services(settings)
        asyncio.run(first.transaction_service.create_transaction("CASH", "2.50", "2.50", [chips]))
        assert create_services(settings).transaction_service.next_transaction_number == 2
