from portal.infrastructure.security import password as password_mod
from portal.infrastructure.security.password import hash_password, verify_password


def test_password_hash_and_verify():
    h = hash_password("s3cret-pass", rounds=4)
    assert h.startswith("$2b$") or h.startswith("$2a$")
    assert verify_password("s3cret-pass", h)
    assert not verify_password("wrong", h)


def test_unrecognised_hash_never_matches():
    assert verify_password("s3cret-pass", "not-a-bcrypt-hash") is False


def test_missing_hash_checks_dummy_and_fails(monkeypatch):
    dummy = hash_password("nobody-knows", rounds=4)
    monkeypatch.setattr(password_mod, "_dummy_hash", lambda: dummy)
    checked = []
    real_verify = password_mod._pwd.verify

    def spy(plain, password_hash):
        checked.append(password_hash)
        return real_verify(plain, password_hash)

    monkeypatch.setattr(password_mod._pwd, "verify", spy)

    assert verify_password("nobody-knows", None) is False
    assert verify_password("s3cret-pass", "") is False
    assert checked == [dummy, dummy]
