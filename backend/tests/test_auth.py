# Overview: Pytest coverage for OTP and password login, staff sessions and account deletion.

"""
Authentication tests.

Verifies:
- OTP signup and login (dev mode returns the code when SMTP is off)
- Codes are single use and expire
- Password login only after the owner sets a strong password
- Staff sessions require the role password and carry only that role
- Account deletion removes every row of the tenant
"""

from datetime import timedelta

import pytest

from foodbook.errors import Unauthorized
from foodbook.models import OneTimeCode, Order, Owner, Product, RoleCredential, SessionToken
from foodbook.services import auth_service, order_service, session_service
from foodbook.services.auth_service import AccountError, PasswordValidationError
from foodbook.time_utils import utcnow


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


def _otp(client, email, purpose):
    resp = client.post("/api/auth/otp", json={"email": email, "purpose": purpose})
    assert resp.status_code == 200, resp.get_json()
    body = resp.get_json()
    assert body["mode"] == "dev"
    return body["code"]


class TestOtpService:

    def test_issue_and_verify(self, db_session, owner_a):
        result = auth_service.issue_otp("Owner_A@Cafe.com", "login")

        assert result["mode"] == "dev"
        assert len(result["code"]) == 6
        auth_service.verify_otp("owner_a@cafe.com", "login", result["code"])
        assert db_session.query(OneTimeCode).count() == 0

    def test_code_is_single_use(self, db_session, owner_a):
        code = auth_service.issue_otp(owner_a.email, "login")["code"]
        auth_service.verify_otp(owner_a.email, "login", code)

        with pytest.raises(Unauthorized):
            auth_service.verify_otp(owner_a.email, "login", code)

    def test_wrong_code(self, db_session, owner_a):
        code = auth_service.issue_otp(owner_a.email, "login")["code"]
        wrong = "000000" if code != "000000" else "111111"

        with pytest.raises(Unauthorized, match="Invalid OTP"):
            auth_service.verify_otp(owner_a.email, "login", wrong)

    def test_expired_code(self, db_session, owner_a):
        code = auth_service.issue_otp(owner_a.email, "login")["code"]
        record = db_session.query(OneTimeCode).one()
        record.expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()

        with pytest.raises(Unauthorized, match="OTP Expired"):
            auth_service.verify_otp(owner_a.email, "login", code)

    def test_purpose_must_match(self, db_session, owner_a):
        code = auth_service.issue_otp(owner_a.email, "security")["code"]
        with pytest.raises(Unauthorized):
            auth_service.verify_otp(owner_a.email, "login", code)

    def test_new_code_replaces_old(self, db_session, owner_a):
        auth_service.issue_otp(owner_a.email, "login")
        auth_service.issue_otp(owner_a.email, "login")
        assert db_session.query(OneTimeCode).count() == 1

    def test_signup_code_for_existing_email(self, db_session, owner_a):
        with pytest.raises(AccountError) as exc:
            auth_service.issue_otp(owner_a.email, "signup")
        assert exc.value.code == "UserExists"

    def test_login_code_for_unknown_email(self, db_session):
        with pytest.raises(AccountError) as exc:
            auth_service.issue_otp("ghost@nowhere.com", "login")
        assert exc.value.code == "UserNotFound"

    def test_unknown_purpose(self, db_session, owner_a):
        with pytest.raises(AccountError):
            auth_service.issue_otp(owner_a.email, "reset")


class TestPasswordStrength:

    @pytest.mark.parametrize("password", ["short1!", "abcdefgh!", "12345678!", "abcd1234"])
    def test_weak_passwords(self, password):
        with pytest.raises(PasswordValidationError):
            auth_service.validate_password_strength(password)

    def test_strong_password(self):
        auth_service.validate_password_strength("Kitchen42!")


class TestAuthApi:

    def test_signup_flow(self, client, db_session):
        code = _otp(client, "new@owner.com", "signup")

        resp = client.post("/api/auth/signup", json={
            "email": "new@owner.com",
            "code": code,
            "company_name": "New Bistro",
        })

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["role"] == "master"
        assert body["owner"]["company_name"] == "New Bistro"
        assert body["owner"]["has_password"] is False

        me = client.get("/api/auth/me", headers=_bearer(body["token"]))
        assert me.get_json()["owner"]["email"] == "new@owner.com"

    def test_signup_existing_email(self, client, db_session, owner_a):
        resp = client.post("/api/auth/otp", json={"email": owner_a.email, "purpose": "signup"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "UserExists"

    def test_otp_login(self, client, db_session, owner_a):
        code = _otp(client, owner_a.email, "login")

        resp = client.post("/api/auth/login/otp", json={"email": owner_a.email, "code": code})

        assert resp.status_code == 200
        assert resp.get_json()["token"]

    def test_otp_login_wrong_code(self, client, db_session, owner_a):
        _otp(client, owner_a.email, "login")
        resp = client.post("/api/auth/login/otp", json={"email": owner_a.email, "code": "abc"})
        assert resp.status_code == 401

    def test_password_login(self, client, db_session, headers_for, owner_a):
        before = client.post("/api/auth/login", json={"email": owner_a.email, "password": "Kitchen42!"})
        assert before.status_code == 401

        weak = client.post("/api/auth/password", json={"password": "weak"}, headers=headers_for(owner_a))
        assert weak.status_code == 400

        ok = client.post("/api/auth/password", json={"password": "Kitchen42!"}, headers=headers_for(owner_a))
        assert ok.status_code == 200

        after = client.post("/api/auth/login", json={"email": owner_a.email, "password": "Kitchen42!"})
        assert after.status_code == 200
        assert after.get_json()["owner"]["has_password"] is True

        wrong = client.post("/api/auth/login", json={"email": owner_a.email, "password": "Kitchen43!"})
        assert wrong.status_code == 401

    def test_logout_revokes_token(self, client, db_session, owner_a):
        _, token = session_service.create_session(owner_a.id)
        headers = _bearer(token)

        assert client.post("/api/auth/logout", headers=headers).status_code == 200
        assert client.get("/api/auth/me", headers=headers).status_code == 401


class TestStaffSessions:

    def test_default_role_password_unlocks_role(self, client, db_session, headers_for, owner_a):
        resp = client.post(
            "/api/auth/staff-session",
            json={"role": "billing", "password": "admin123"},
            headers=headers_for(owner_a),
        )

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["role"] == "billing"

        me = client.get("/api/auth/me", headers=_bearer(body["token"]))
        assert me.get_json()["role"] == "billing"

    def test_wrong_role_password(self, client, db_session, headers_for, owner_a):
        resp = client.post(
            "/api/auth/staff-session",
            json={"role": "chief", "password": "nope"},
            headers=headers_for(owner_a),
        )
        assert resp.status_code == 401

    def test_master_is_not_a_staff_role(self, client, db_session, headers_for, owner_a):
        resp = client.post(
            "/api/auth/staff-session",
            json={"role": "master", "password": "admin123"},
            headers=headers_for(owner_a),
        )
        assert resp.status_code == 400

    def test_staff_cannot_mint_sessions(self, client, db_session, headers_for, owner_a):
        resp = client.post(
            "/api/auth/staff-session",
            json={"role": "billing", "password": "admin123"},
            headers=headers_for(owner_a, "chief"),
        )
        assert resp.status_code == 403

    def test_revoked_role_sessions(self, db_session, owner_a):
        _, chief_token = session_service.create_session(owner_a.id, role="chief")
        _, master_token = session_service.create_session(owner_a.id)

        assert session_service.revoke_all_owner_sessions(owner_a.id, role="chief") == 1
        assert session_service.validate_session(chief_token) is None
        assert session_service.validate_session(master_token).role == "master"

    def test_idle_session_expires(self, db_session, owner_a):
        session, token = session_service.create_session(owner_a.id)
        session.last_used_at = utcnow() - timedelta(hours=3)
        db_session.commit()

        assert session_service.validate_session(token) is None


class TestDeleteAccount:

    def test_requires_delete_code(self, client, db_session, headers_for, owner_a):
        resp = client.delete("/api/auth/account", json={"code": "123456"}, headers=headers_for(owner_a))
        assert resp.status_code == 401
        db_session.expire_all()
        assert db_session.query(Owner).count() == 1

    def test_removes_tenant_data(self, client, db_session, headers_for, owner_a, owner_b, make_product):
        coke_a = make_product(owner_a, stock=5)
        make_product(owner_b, name="Burger", stock=5)
        order_service.create_order("A1", [{"product_id": coke_a.id, "quantity": 1}])
        headers = headers_for(owner_a)
        client.get("/api/settings/roles", headers=headers)
        owner_id, other_id = owner_a.id, owner_b.id

        code = _otp(client, owner_a.email, "delete_account")
        resp = client.delete("/api/auth/account", json={"code": code}, headers=headers)

        assert resp.status_code == 200
        db_session.expire_all()
        assert [o.id for o in db_session.query(Owner).all()] == [other_id]
        assert db_session.query(Product).count() == 1
        assert db_session.query(Order).count() == 0
        assert db_session.query(RoleCredential).count() == 0
        assert db_session.query(SessionToken).filter_by(owner_id=owner_id).count() == 0
        assert client.get("/api/auth/me", headers=headers).status_code == 401
