"""
Tests for configuration and structured logging
"""

import json
import logging
import pytest

from wallet import config as config_module
from wallet.aggregator import sum_payments
from wallet.config import WalletConfig, get_config, reload_config
from wallet.logging_config import JSONFormatter, setup_logging, log_action
from wallet.models import Payment


class TestWalletConfig:
    """Test pydantic-settings configuration"""

    @pytest.fixture(autouse=True)
    def restore_config(self, monkeypatch):
        """Restore the default configuration after each test"""
        yield
        monkeypatch.undo()
        reload_config()

    def test_defaults(self):
        """Test default values"""
        cfg = WalletConfig()

        assert cfg.default_workers == 4
        assert cfg.log_level == "INFO"
        assert cfg.accounts_dump_name == "accounts.dump"
        assert cfg.payments_dump_name == "payments.dump"
        assert cfg.favorites_dump_name == "favorites.dump"

    def test_environment_override(self, monkeypatch):
        """Test that WALLET_ environment variables override defaults"""
        monkeypatch.setenv("WALLET_DEFAULT_WORKERS", "7")
        monkeypatch.setenv("WALLET_LOG_LEVEL", "DEBUG")

        cfg = reload_config()

        assert cfg.default_workers == 7
        assert cfg.log_level == "DEBUG"
        assert get_config() is cfg
        assert config_module.config is cfg

    def test_default_workers_used_by_aggregator(self, monkeypatch):
        """Test that the aggregator honours the configured worker count"""
        monkeypatch.setenv("WALLET_DEFAULT_WORKERS", "3")
        reload_config()
        payments = [Payment(f"p{i}", 1, i, "auto") for i in range(10)]

        assert sum_payments(payments) == 45

    def test_dump_names_from_environment(self, monkeypatch, tmp_path):
        """Test renaming dump files through configuration"""
        from wallet.service import WalletService

        monkeypatch.setenv("WALLET_ACCOUNTS_DUMP_NAME", "acc.txt")
        reload_config()
        service = WalletService()
        service.register_account("+992000000001")

        service.export(tmp_path)

        assert (tmp_path / "acc.txt").exists()


class TestLogging:
    """Test JSON structured logging"""

    def test_json_formatter(self):
        """Test that records are rendered as JSON with structured fields"""
        logger = logging.getLogger("wallet.test")
        record = logger.makeRecord("wallet.test", logging.INFO, __name__, 0,
                                   "Payment created", (), None)
        record.action = "pay"
        record.extra = {"amount": 100}

        entry = json.loads(JSONFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["message"] == "Payment created"
        assert entry["action"] == "pay"
        assert entry["extra"] == {"amount": 100}
        assert "resource" not in entry

    def test_setup_logging(self):
        """Test handler and level configuration"""
        logger = setup_logging(level="DEBUG", logger_name="wallet.test.setup")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)
        assert not logger.propagate

        # Calling again must not stack handlers
        setup_logging(level="INFO", logger_name="wallet.test.setup")
        assert len(logger.handlers) == 1

    def test_log_action(self, caplog):
        """Test that log_action attaches structured attributes"""
        logger = logging.getLogger("wallet.test.action")

        with caplog.at_level(logging.INFO, logger="wallet.test.action"):
            log_action(logger, "info", "Deposited", action="deposit",
                       resource="account:1", extra={"amount": 5})

        assert len(caplog.records) == 1
        assert caplog.records[0].action == "deposit"
        assert caplog.records[0].resource == "account:1"

    def test_setup_logging_from_config(self, monkeypatch):
        """Test that logging picks up level and format from configuration"""
        from wallet.logging_config import setup_logging_from_config

        monkeypatch.setenv("WALLET_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("WALLET_LOG_FORMAT", "text")
        reload_config()
        try:
            logger = setup_logging_from_config()

            assert logger.name == "wallet"
            assert logger.level == logging.WARNING
            assert not isinstance(logger.handlers[0].formatter, JSONFormatter)
        finally:
            monkeypatch.undo()
            reload_config()
            logging.getLogger("wallet").handlers.clear()
            logging.getLogger("wallet").propagate = True
            logging.getLogger("wallet").setLevel(logging.NOTSET)
