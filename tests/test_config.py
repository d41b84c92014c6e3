from __future__ import annotations

import json

import pytest

from photoslurp.config import Settings, load_user_config, normalize_tag
from photoslurp.errors import ConfigError


def resolve(tags=("fire",), options=None, user_config=None):
    return Settings.resolve(list(tags), options or {}, user_config or {})


class TestLoadUserConfig:
    def test_missing_file_is_empty(self, tmp_path) -> None:
        assert load_user_config(tmp_path / "nope.json") == {}
        assert load_user_config(None) == {}

    def test_reads_json(self, tmp_path) -> None:
        path = tmp_path / "photoslurp.json"
        path.write_text(json.dumps({"flickr_key": "abc"}))
        assert load_user_config(path) == {"flickr_key": "abc"}

    def test_invalid_json(self, tmp_path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{nope")
        with pytest.raises(ConfigError):
            load_user_config(path)


class TestSettings:
    def test_command_line_wins(self) -> None:
        settings = resolve(options={"flickr_key": "cli"}, user_config={"flickr_key": "file", "auto_approve": True})
        assert settings.flickr_key == "cli"
        assert settings.auto_approve is True
        assert settings.use_spreadsheet is False

    def test_tags_are_normalized(self) -> None:
        settings = resolve(tags=["#fire ", "morganfire01"], options={"flickr_key": "k"})
        assert settings.tags == ["fire", "morganfire01"]
        assert normalize_tag("  #tag") == "tag"

    def test_needs_a_tag(self) -> None:
        with pytest.raises(ConfigError, match="at least one tag"):
            resolve(tags=[], options={"flickr_key": "k"})

    def test_rejects_blank_tags(self) -> None:
        with pytest.raises(ConfigError):
            resolve(tags=["#"], options={"flickr_key": "k"})

    def test_needs_an_api_key(self) -> None:
        with pytest.raises(ConfigError, match="at least one API key"):
            resolve()

    def test_twitter_needs_secret(self) -> None:
        with pytest.raises(ConfigError):
            resolve(options={"twitter_key": "k"})

    def test_partial_spreadsheet_options(self, monkeypatch) -> None:
        monkeypatch.delenv("GOOGLE_APPLICATION_CREDENTIALS", raising=False)
        with pytest.raises(ConfigError, match="spreadsheet ID"):
            resolve(options={"flickr_key": "k", "google_spreadsheet_id": "sheet"})
        with pytest.raises(ConfigError, match="spreadsheet ID"):
            resolve(options={"flickr_key": "k", "google_application_credentials": "key.json"})

    def test_credentials_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", "/keys/key.json")
        settings = resolve(options={"flickr_key": "k", "google_spreadsheet_id": "sheet"})
        assert settings.google_application_credentials == "/keys/key.json"
        assert settings.use_spreadsheet

    def test_batch_size_must_be_positive(self) -> None:
        with pytest.raises(ConfigError):
            resolve(options={"flickr_key": "k", "update_batch_size": 0})

    def test_unknown_config_keys_are_ignored(self) -> None:
        settings = resolve(user_config={"flickr_key": "k", "flickr_secret": "s"})
        assert settings.flickr_key == "k"
        assert not hasattr(settings, "flickr_secret")
