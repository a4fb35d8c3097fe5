"""Configuration tests."""

from pathlib import Path

import pytest

from shopmgr import create_app
from shopmgr.config import RECORD_FORMAT_LEGACY, Config
from shopmgr.services import auth_service, customers_service


class TestConfig:

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SHOPMGR_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("SHOPMGR_BCRYPT_ROUNDS", "5")
        config = Config.from_env()
        assert config.data_dir == tmp_path
        assert config.bcrypt_rounds == 5
        assert config.products_path == tmp_path / "products.csv"

    def test_explicit_override_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SHOPMGR_DATA_DIR", "/nowhere")
        config = Config.from_env(data_dir=tmp_path, log_level=None)
        assert config.data_dir == Path(tmp_path)
        assert config.log_level == "WARNING"

    def test_unknown_record_format(self):
        with pytest.raises(ValueError):
            Config(record_format="xml")


class TestRecordFormats:

    def test_legacy_format_writes_unquoted(self, tmp_path):
        config = Config(data_dir=tmp_path, record_format=RECORD_FORMAT_LEGACY, bcrypt_rounds=4)
        app = create_app(config)
        session = auth_service.login(app.stores, "admin", "admin")

        customers_service.create_customer(
            app.stores, session, name="Bob", phone="1", email="b@x", address="2 Elm"
        )

        assert config.customers_path.read_text() == "1,Bob,1,b@x,2 Elm\n"

    def test_file_log_handler(self, tmp_path):
        config = Config(data_dir=tmp_path / "data", log_dir=tmp_path / "logs", log_level="INFO")
        create_app(config)
        assert (tmp_path / "logs" / "shopmgr.log").exists()
