import jwt
import pytest
from datetime import timedelta
from app.core.security import ALGORITHM, TOKEN_EXPIRED, create_access_token, decode_access_token
from app.models.user import UserRole


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_token_round_trip():
    token = create_access_token({"sub": "42", "role": "EMPLOYEE"})
    payload = decode_access_token(token)
    assert payload["sub"] == "42"
    assert payload["role"] == "EMPLOYEE"
    assert payload["type"] == "access"
    assert "exp" in payload


def test_token_signed_with_other_secret_is_rejected():
    token = jwt.encode({"sub": "42", "type": "access"}, "some-other-secret-of-sufficient-length", algorithm=ALGORITHM)
    assert decode_access_token(token) is None


def test_expired_token_is_flagged():
    token = create_access_token({"sub": "42"}, expires_delta=timedelta(seconds=-1))
    assert decode_access_token(token) == {"error": TOKEN_EXPIRED}


def test_empty_token():
    assert decode_access_token("") is None


def test_expired_token_is_401(client, employee):
    token = create_access_token({"sub": str(employee.id)}, expires_delta=timedelta(seconds=-1))
    response = client.get("/api/v1/reviews", headers=_bearer(token))
    assert response.status_code == 401
    assert response.json()["errors"][0]["msg"] == TOKEN_EXPIRED
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_wrong_token_type_is_401(client, employee):
    token = create_access_token({"sub": str(employee.id), "type": "refresh"})
    response = client.get("/api/v1/reviews", headers=_bearer(token))
    assert response.status_code == 401


def test_unknown_subject_is_401(client, employee):
    token = create_access_token({"sub": "9999"})
    response = client.get("/api/v1/reviews", headers=_bearer(token))
    assert response.status_code == 401


def test_localized_role_claim_is_accepted(client, manager):
    token = create_access_token({"sub": str(manager.id), "role": "组长"})
    response = client.get("/api/v1/team/reviews", headers=_bearer(token))
    assert response.status_code == 200


def test_stored_role_wins_over_claim(client, employee):
    # Claiming HR does not unlock HR-only listings
    token = create_access_token({"sub": str(employee.id), "role": "人事"})
    response = client.get("/api/v1/reviews/all-submitted", headers=_bearer(token))
    assert response.status_code == 403


def test_unknown_role_claim_is_401(client, employee):
    token = create_access_token({"sub": str(employee.id), "role": "boss"})
    response = client.get("/api/v1/reviews", headers=_bearer(token))
    assert response.status_code == 401
    assert response.json()["errors"][0]["msg"] == "Invalid role claim"


@pytest.mark.parametrize("label, role", [
    ("EMPLOYEE", UserRole.EMPLOYEE),
    ("team_lead", UserRole.TEAM_LEAD),
    ("员工", UserRole.EMPLOYEE),
    ("组长", UserRole.TEAM_LEAD),
    ("中心负责人", UserRole.CENTER_HEAD),
    ("人事", UserRole.HR),
    (" 管理员 ", UserRole.ADMIN),
])
def test_role_labels(label, role):
    assert UserRole.parse(label) == role


@pytest.mark.parametrize("label", ["", "boss", None, 3])
def test_unknown_role_label(label):
    with pytest.raises(ValueError):
        UserRole.parse(label)
