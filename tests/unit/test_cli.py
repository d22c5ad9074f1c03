"""Tests for alienfood/cli.py and alienfood/config.py"""

from unittest.mock import AsyncMock, patch

import pytest

from alienfood.cli import main
from alienfood.config import get_admin_secret, get_api_base_url, load_config


class TestCli:
    def test_version(self, capsys):
        main(["--version"])

        assert "Alien Food Push version" in capsys.readouterr().out

    def test_generate_keys(self, capsys):
        main(["generate-keys"])

        out = capsys.readouterr().out
        assert "VAPID_PUBLIC_KEY=" in out
        assert "VAPID_PRIVATE_KEY=" in out

    def test_public_key_invalid_configuration_exits(self, monkeypatch):
        monkeypatch.setenv("VAPID_PUBLIC_KEY", "short")
        monkeypatch.setenv("VAPID_PRIVATE_KEY", "short")

        with pytest.raises(SystemExit) as exc_info:
            main(["public-key"])

        assert exc_info.value.code == 1

    def test_send_reports_queue(self, capsys):
        result = {"success": True, "sent": 0, "failed": 0, "results": [], "queued": True}
        with patch("alienfood.push.web_push.send_notification", AsyncMock(return_value=result)) as send:
            main(["send", "--title", "Hola", "--message", "Mundo", "--user-id", "ana@example.com"])

        assert send.call_args.kwargs["user_id"] == "ana@example.com"
        assert "saved for later" in capsys.readouterr().out

    def test_serve_runs_uvicorn(self):
        with patch("uvicorn.run") as run:
            main(["serve", "--port", "5050"])

        assert run.call_args.args == ("alienfood.backend.main:app",)
        assert run.call_args.kwargs["port"] == 5050


class TestConfig:
    def test_defaults(self):
        config = load_config()

        assert config["api_base_url"] == "http://localhost:5000"
        assert config["admin_secret"] == "change-me"
        assert config["cors_origins"] == ["*"]

    def test_file_then_environment(self, isolated_config, monkeypatch):
        isolated_config.write_text(
            "push:\n"
            "  api_base_url: http://shop.example.com/\n"
            "  admin_secret: from-file\n"
        )

        assert get_api_base_url() == "http://shop.example.com"
        assert get_admin_secret() == "from-file"

        monkeypatch.setenv("ADMIN_SECRET", "from-env")
        monkeypatch.setenv("ALIENFOOD_CORS_ORIGINS", "http://a.test, http://b.test")

        assert get_admin_secret() == "from-env"
        assert load_config()["cors_origins"] == ["http://a.test", "http://b.test"]
