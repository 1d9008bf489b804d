"""Comprehensive tests for the user feature.
Covers: UserService registration and profile updates, /users endpoints, request validation.
"""

import pytest
from fastapi import status
from pydantic import ValidationError

from src.features.user.exceptions import EmailAlreadyExists, UsernameAlreadyExists
from src.features.user.schemas import UserRegisterRequest, UserUpdateRequest
from src.features.user.service import UserService

# UserService Unit Tests


class TestUserServiceRegistration:
    """Tests for UserService.register_user()"""

    async def test_register_user_success(self, session):
        data = UserRegisterRequest(
            email="newuser@example.com",
            username="newuser",
            password="SecurePass123",
            first_name="New",
            last_name="User",
        )
        user = await UserService.register_user(session, data)

        assert user.id is not None
        assert user.email == "newuser@example.com"
        assert user.username == "newuser"
        assert user.first_name == "New"
        assert user.hashed_password != "SecurePass123"
        assert user.verify_password("SecurePass123")
        assert not user.verify_password("SecurePass124")

    async def test_register_user_duplicate_username(self, session, make_user):
        await make_user(username="taken")

        data = UserRegisterRequest(email="other@example.com", username="taken", password="Pass12345")

        with pytest.raises(UsernameAlreadyExists):
            await UserService.register_user(session, data)

    async def test_register_user_duplicate_email(self, session, make_user):
        await make_user(email="taken@example.com")

        data = UserRegisterRequest(email="TAKEN@example.com", username="someoneelse", password="Pass12345")

        with pytest.raises(EmailAlreadyExists):
            await UserService.register_user(session, data)


class TestUserServiceUpdate:
    """Tests for UserService.update_user()"""

    async def test_update_profile_fields(self, session, make_user):
        user = await make_user()

        updated = await UserService.update_user(session, user, UserUpdateRequest(first_name="Adam", last_name="Ondra"))

        assert updated.first_name == "Adam"
        assert updated.last_name == "Ondra"

    async def test_omitted_fields_are_left_alone(self, session, make_user):
        user = await make_user(username="keepme", email="keep@example.com")

        await UserService.update_user(session, user, UserUpdateRequest(first_name="Changed"))

        assert user.username == "keepme"
        assert user.email == "keep@example.com"

    async def test_update_to_taken_username(self, session, make_user):
        await make_user(username="taken")
        user = await make_user()

        with pytest.raises(UsernameAlreadyExists):
            await UserService.update_user(session, user, UserUpdateRequest(username="taken"))

    async def test_update_to_taken_email(self, session, make_user):
        await make_user(email="taken@example.com")
        user = await make_user()

        with pytest.raises(EmailAlreadyExists):
            await UserService.update_user(session, user, UserUpdateRequest(email="taken@example.com"))

    async def test_update_to_own_username_is_allowed(self, session, make_user):
        user = await make_user(username="same")

        updated = await UserService.update_user(session, user, UserUpdateRequest(username="same"))

        assert updated.username == "same"


# Schema validation


class TestRegisterRequestValidation:
    def test_username_is_trimmed(self):
        data = UserRegisterRequest(username="  alex  ", email="alex@example.com", password="crimpy2024")
        assert data.username == "alex"

    def test_email_is_lower_cased(self):
        data = UserRegisterRequest(username="alex", email="Alex@Example.COM", password="crimpy2024")
        assert data.email == "alex@example.com"

    @pytest.mark.parametrize("username", ["ab", "has space", "semi;colon", "x" * 51])
    def test_invalid_usernames(self, username):
        with pytest.raises(ValidationError):
            UserRegisterRequest(username=username, email="alex@example.com", password="crimpy2024")

    def test_invalid_email(self):
        with pytest.raises(ValidationError):
            UserRegisterRequest(username="alex", email="not-an-email", password="crimpy2024")

    def test_overlong_email(self):
        with pytest.raises(ValidationError, match="Email must be at most 100 characters"):
            UserRegisterRequest(username="alex", email=f"alex@{'a' * 50}.{'b' * 50}.com", password="crimpy2024")

    def test_weak_password(self):
        with pytest.raises(ValidationError, match="Password must contain at least one digit"):
            UserRegisterRequest(username="alex", email="alex@example.com", password="onlyletters")


# POST /users


class TestCreateUser:
    """Tests for POST /users"""

    async def test_create_user(self, client):
        response = await client.post(
            "/users",
            json={
                "username": "newclimber",
                "email": "NewClimber@Example.com",
                "password": "crimpy2024",
                "first_name": "New",
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["api_name"] == "create_user"
        assert body["status"] == "success"
        assert body["data"]["username"] == "newclimber"
        assert body["data"]["email"] == "newclimber@example.com"
        assert body["data"]["first_name"] == "New"
        assert "hashed_password" not in body["data"]
        assert "password" not in body["data"]

    async def test_create_user_duplicate_username(self, client, make_user):
        await make_user(username="taken")

        response = await client.post(
            "/users",
            json={"username": "taken", "email": "fresh@example.com", "password": "crimpy2024"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        error = response.json()["error"]
        assert error["code"] == "INVALID_INPUT"
        assert error["message"] == "User with this username already exists"
        assert error["details"] == {"field": "username", "value": "taken"}

    async def test_create_user_duplicate_email(self, client, make_user):
        await make_user(email="taken@example.com")

        response = await client.post(
            "/users",
            json={"username": "fresh", "email": "taken@example.com", "password": "crimpy2024"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["message"] == "User with this email already exists"

    async def test_create_user_invalid_body(self, client):
        response = await client.post("/users", json={"username": "x", "email": "bad", "password": "short"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["status"] == "error"
        assert body["error"]["code"] == "VALIDATION_FAILED"
        assert isinstance(body["error"]["details"], list)

    async def test_new_user_can_log_in(self, client):
        await client.post(
            "/users",
            json={"username": "freshie", "email": "freshie@example.com", "password": "crimpy2024"},
        )

        response = await client.post("/login", json={"username": "freshie", "password": "crimpy2024"})

        assert response.status_code == status.HTTP_200_OK


# GET /users


class TestGetUser:
    """Tests for GET /users"""

    async def test_get_current_user(self, auth_client):
        client, user = auth_client

        response = await client.get("/users")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["api_name"] == "get_user"
        assert body["data"]["id"] == user.id
        assert body["data"]["username"] == user.username
        assert body["data"]["email"] == user.email

    async def test_get_user_requires_authentication(self, client):
        response = await client.get("/users")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_deleted_user_is_not_found(self, auth_client, session):
        client, user = auth_client
        await session.delete(user)
        await session.commit()

        response = await client.get("/users")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"]["code"] == "NOT_FOUND"


# PUT /users


class TestUpdateUser:
    """Tests for PUT /users"""

    async def test_update_profile(self, auth_client):
        client, user = auth_client

        response = await client.put("/users", json={"first_name": "Janja", "last_name": "Garnbret"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["first_name"] == "Janja"
        assert data["last_name"] == "Garnbret"
        assert data["username"] == user.username

    async def test_update_email_normalized(self, auth_client):
        client, _ = auth_client

        response = await client.put("/users", json={"email": "Moved@Example.com"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["email"] == "moved@example.com"

    async def test_update_to_taken_username(self, auth_client, make_user):
        client, _ = auth_client
        await make_user(username="occupied")

        response = await client.put("/users", json={"username": "occupied"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["details"]["field"] == "username"

    async def test_update_requires_authentication(self, client):
        response = await client.put("/users", json={"first_name": "Nobody"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
