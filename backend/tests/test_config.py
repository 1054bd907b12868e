from face_portal.utils.config import Settings


def test_upstream_url_trailing_slash_is_stripped(monkeypatch):
    monkeypatch.setenv("FACE_REC_API_URL", "http://face-rec.test/api/")
    assert Settings().FACE_REC_API_URL == "http://face-rec.test/api"


def test_defaults(monkeypatch):
    monkeypatch.setenv("FACE_REC_API_URL", "http://face-rec.test")
    for key in ("PORT", "REQUEST_TIMEOUT", "RECOGNIZE_TIMEOUT", "DELETE_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)
    settings = Settings(_env_file=None)
    assert settings.PORT == 8004
    assert settings.REQUEST_TIMEOUT == 30.0
    assert settings.RECOGNIZE_TIMEOUT == 45.0
    assert settings.DELETE_TIMEOUT == 15.0


def test_cors_origins_accepts_a_list(monkeypatch):
    monkeypatch.setenv("FACE_REC_API_URL", "http://face-rec.test")
    monkeypatch.setenv("CORS_ORIGIN", "https://a.example, https://b.example")
    assert Settings().cors_origins == ["https://a.example", "https://b.example"]
