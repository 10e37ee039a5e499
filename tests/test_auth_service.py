import pytest
from pydantic import ValidationError as PydanticValidationError

from app.domain.exceptions import AuthenticationError, ConflictError, NotFoundError
from app.schemas import SecurityUpdateRequest, SignupRequest
from app.services.application.auth_service import (
    INVALID_CREDENTIALS_MESSAGE,
    UNKNOWN_EMAIL_MESSAGE,
    UserAuthManager,
)


@pytest.fixture()
def auth_manager(user_repo, mock_audit_logger):
    return UserAuthManager(user_repo, mock_audit_logger)


@pytest.fixture()
def registered(auth_manager):
    return auth_manager.register_user("Juan Dela Cruz", "juan@example.com", "secret123")


class TestRegistration:
    def test_register_hides_password_hash(self, registered):
        assert registered["email"] == "juan@example.com"
        assert registered["role"] == "client"
        assert "password_hash" not in registered

    def test_password_is_hashed(self, auth_manager, user_repo, registered):
        stored = user_repo.get(registered["id"])["password_hash"]
        assert stored != "secret123"
        assert auth_manager.check_password(stored, "secret123")

    def test_duplicate_email_conflicts(self, auth_manager, registered, mock_audit_logger):
        with pytest.raises(ConflictError):
            auth_manager.register_user("Someone Else", "juan@example.com", "another1")
        assert mock_audit_logger.log_event.call_args.kwargs["outcome"] == "conflict"


class TestAuthentication:
    def test_login_success(self, auth_manager, registered):
        user = auth_manager.authenticate_user("juan@example.com", "secret123")
        assert user["id"] == registered["id"]

    def test_unknown_email_has_distinct_message(self, auth_manager):
        with pytest.raises(AuthenticationError, match=UNKNOWN_EMAIL_MESSAGE):
            auth_manager.authenticate_user("nobody@example.com", "secret123")

    def test_wrong_password(self, auth_manager, registered):
        with pytest.raises(AuthenticationError, match=INVALID_CREDENTIALS_MESSAGE):
            auth_manager.authenticate_user("juan@example.com", "wrong-password")


class TestSecurityUpdate:
    def test_requires_current_password(self, auth_manager, registered):
        with pytest.raises(AuthenticationError):
            auth_manager.update_security(registered["id"], "bad", new_password="newsecret1")

    def test_changes_password(self, auth_manager, registered):
        auth_manager.update_security(registered["id"], "secret123", new_password="newsecret1")
        assert auth_manager.authenticate_user("juan@example.com", "newsecret1")["id"] == registered["id"]

    def test_changes_email(self, auth_manager, registered):
        user = auth_manager.update_security(registered["id"], "secret123", email="juan.new@example.com")
        assert user["email"] == "juan.new@example.com"

    def test_email_taken_by_another_user(self, auth_manager, registered):
        auth_manager.register_user("Maria", "maria@example.com", "secret456")
        with pytest.raises(ConflictError):
            auth_manager.update_security(registered["id"], "secret123", email="maria@example.com")

    def test_unknown_user(self, auth_manager):
        with pytest.raises(NotFoundError):
            auth_manager.get_profile(404)


class TestPasswordLength:
    def test_signup_accepts_72_bytes(self):
        body = SignupRequest.model_validate({"name": "Ana", "email": "ana@example.com", "password": "p" * 72})
        assert len(body.password) == 72

    @pytest.mark.parametrize("password", ["p" * 73, "p" * 100, "ñ" * 37])
    def test_signup_rejects_more_than_72_bytes(self, password):
        with pytest.raises(PydanticValidationError):
            SignupRequest.model_validate({"name": "Ana", "email": "ana@example.com", "password": password})

    def test_security_update_rejects_long_new_password(self):
        with pytest.raises(PydanticValidationError):
            SecurityUpdateRequest.model_validate({"currentPassword": "secret123", "newPassword": "x" * 73})

    def test_long_login_password_is_invalid_credentials(self, auth_manager, registered):
        with pytest.raises(AuthenticationError) as exc_info:
            auth_manager.authenticate_user("juan@example.com", "p" * 100)
        assert str(exc_info.value) == INVALID_CREDENTIALS_MESSAGE
