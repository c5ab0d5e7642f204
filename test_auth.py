import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.auth import get_bearer_token, get_current_user
from src.api.v1.auth import register, login, refresh_token, logout, get_current_user_info
from src.core.exceptions import InvalidCredentials, InvalidToken, Unauthenticated
from src.models.user import User
from src.schemas.auth import UserCreate, UserLogin, RefreshTokenRequest
from src.services.security_service import SecurityService
from src.services.token_service import TokenService


def make_request(host="127.0.0.1", user_agent="pytest"):
    request = MagicMock()
    request.client.host = host
    request.headers = {"user-agent": user_agent}
    return request


class TestAuthEndpoints:
    def setup_method(self):
        self.mock_db = AsyncMock(spec=AsyncSession)
        self.mock_user = User(
            id=1,
            name="Ana",
            email="ana@example.com",
            hashed_password="hashed_password",
        )
        self.tokens = {
            "access_token": "access-secret",
            "refresh_token": "refresh-secret",
            "expires_at": datetime.utcnow() + timedelta(hours=1),
        }

    @pytest.mark.asyncio
    async def test_register_signs_the_user_in(self):
        user_data = UserCreate(
            name="Ana",
            email="ana@example.com",
            password="secret123",
            password_confirmation="secret123",
        )

        with patch.object(SecurityService, 'register_user', return_value=self.mock_user) as mock_register, \
             patch.object(TokenService, 'issue', return_value=self.tokens) as mock_issue:
            result = await register(user_data, make_request(), db=self.mock_db)

        mock_register.assert_awaited_once_with(
            self.mock_db, name="Ana", email="ana@example.com", password="secret123"
        )
        mock_issue.assert_awaited_once_with(
            self.mock_db, self.mock_user, client_ip="127.0.0.1", user_agent="pytest"
        )
        assert result == {
            "user": self.mock_user,
            "access_token": "access-secret",
            "refresh_token": "refresh-secret",
        }

    def test_register_requires_matching_confirmation(self):
        with pytest.raises(ValidationError) as exc_info:
            UserCreate(
                name="Ana",
                email="ana@example.com",
                password="secret123",
                password_confirmation="secret321",
            )

        assert exc_info.value.errors()[0]["loc"] == ("password_confirmation",)

    def test_register_requires_six_character_password(self):
        with pytest.raises(ValidationError):
            UserCreate(name="Ana", email="ana@example.com", password="12345", password_confirmation="12345")

    @pytest.mark.asyncio
    async def test_login_success(self):
        credentials = UserLogin(email="ana@example.com", password="secret123")

        with patch.object(SecurityService, 'authenticate_user', return_value=self.mock_user), \
             patch.object(TokenService, 'issue', return_value=self.tokens):
            result = await login(credentials, make_request(), db=self.mock_db)

        assert result["user"] == self.mock_user
        assert result["access_token"] == "access-secret"
        assert result["refresh_token"] == "refresh-secret"
        assert "expires_at" in result

    @pytest.mark.asyncio
    async def test_login_invalid_credentials(self):
        credentials = UserLogin(email="ana@example.com", password="wrong")

        with patch.object(SecurityService, 'authenticate_user', return_value=None), \
             patch.object(TokenService, 'issue') as mock_issue:
            with pytest.raises(InvalidCredentials) as exc_info:
                await login(credentials, make_request(), db=self.mock_db)

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Invalid credentials"
        mock_issue.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_refresh_token(self):
        with patch.object(TokenService, 'refresh', return_value=self.tokens) as mock_refresh:
            result = await refresh_token(
                RefreshTokenRequest(refresh_token="refresh-secret"),
                make_request(host="10.0.0.2"),
                db=self.mock_db,
            )

        assert result == self.tokens
        mock_refresh.assert_awaited_once_with(
            self.mock_db, "refresh-secret", client_ip="10.0.0.2", user_agent="pytest"
        )

    @pytest.mark.asyncio
    async def test_logout_revokes_presented_token(self):
        with patch.object(TokenService, 'revoke', return_value=True) as mock_revoke:
            result = await logout(token="access-secret", current_user=self.mock_user, db=self.mock_db)

        mock_revoke.assert_awaited_once_with(self.mock_db, "access-secret")
        assert result == {"message": "Logged out successfully"}

    @pytest.mark.asyncio
    async def test_get_current_user_info(self):
        assert await get_current_user_info(current_user=self.mock_user) == self.mock_user


class TestAuthDependencies:
    def setup_method(self):
        self.mock_db = AsyncMock(spec=AsyncSession)

    @pytest.mark.asyncio
    async def test_missing_bearer_token(self):
        with pytest.raises(Unauthenticated):
            await get_bearer_token(token=None)

    @pytest.mark.asyncio
    async def test_bearer_token_passthrough(self):
        assert await get_bearer_token(token="access-secret") == "access-secret"

    @pytest.mark.asyncio
    async def test_current_user_from_token(self):
        user = User(id=1, name="Ana", email="ana@example.com", hashed_password="x")
        with patch.object(TokenService, 'validate_access', return_value=user) as mock_validate:
            assert await get_current_user(token="access-secret", db=self.mock_db) == user

        mock_validate.assert_awaited_once_with(self.mock_db, "access-secret")

    @pytest.mark.asyncio
    async def test_invalid_token_propagates(self):
        with patch.object(TokenService, 'validate_access', side_effect=InvalidToken()):
            with pytest.raises(InvalidToken):
                await get_current_user(token="revoked", db=self.mock_db)
