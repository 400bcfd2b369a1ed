import pytest

from linkgroups import create_app
from linkgroups.config import TestConfig
from linkgroups.extensions import db
from linkgroups.models import AllowedEmail


class FakeS3:
    def __init__(self):
        self.puts = []
        self.deletes = []

    def put_object(self, **kwargs):
        self.puts.append(kwargs)
        return {"ETag": '"fake"'}

    def delete_object(self, **kwargs):
        self.deletes.append(kwargs)
        return {}


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.drop_all()
        db.create_all()
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def fake_s3(monkeypatch):
    storage = FakeS3()
    monkeypatch.setattr(
        "linkgroups.services.images._storage_client", lambda: storage
    )
    return storage


@pytest.fixture
def login(app, client, monkeypatch):
    """Sign ``client`` in through the OAuth callback with a canned profile."""

    def _login(
        email="user@example.com", sub=None, name="Test User", allow=True, http=None
    ):
        http = http or client
        if allow:
            with app.app_context():
                if not AllowedEmail.query.filter_by(email=email).first():
                    db.session.add(AllowedEmail(email=email))
                    db.session.commit()
        profile = {
            "sub": sub or f"google-{email}",
            "email": email,
            "name": name,
            "picture": "https://example.com/avatar.png",
        }
        monkeypatch.setattr("linkgroups.auth.routes._fetch_profile", lambda: profile)
        response = http.get("/api/auth/google/callback")
        assert response.status_code == 302
        me = http.get("/api/auth/me")
        return me.get_json() if me.status_code == 200 else None

    return _login
