from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from google.auth.exceptions import RefreshError, TransportError

from photoslurp.auth import TokenSupplier
from photoslurp.errors import AuthFailure, NetworkError, StoreFailure


def supplier_with(creds):
    supplier = TokenSupplier("key.json")
    supplier.creds = creds
    return supplier


class TestTokenSupplier:
    def test_returns_cached_token(self) -> None:
        creds = MagicMock(valid=True, token="cached")
        assert supplier_with(creds).get_token() == "cached"
        creds.refresh.assert_not_called()

    def test_refreshes_invalid_token(self) -> None:
        creds = MagicMock(valid=False, token="fresh")
        assert supplier_with(creds).get_token() == "fresh"
        creds.refresh.assert_called_once()

    def test_rejected_credentials(self) -> None:
        creds = MagicMock()
        creds.refresh.side_effect = RefreshError("invalid_grant")
        with pytest.raises(AuthFailure):
            supplier_with(creds).refresh()

    def test_transport_errors_are_retryable(self) -> None:
        creds = MagicMock()
        creds.refresh.side_effect = TransportError("no route")
        with pytest.raises(NetworkError):
            supplier_with(creds).refresh()

    def test_loads_service_account_on_first_use(self) -> None:
        creds = MagicMock(valid=True, token="t")
        with patch("google.oauth2.service_account.Credentials.from_service_account_file",
                   return_value=creds) as loader:
            supplier = TokenSupplier("key.json")
            assert supplier.get_token() == "t"
            assert supplier.get_token() == "t"
        loader.assert_called_once()

    def test_missing_key_file(self, tmp_path) -> None:
        with pytest.raises(StoreFailure, match="Could not find"):
            TokenSupplier(tmp_path / "missing.json").get_token()
