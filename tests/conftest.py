import pytest

from credvault.vault import encrypt_secret, mark


PASSPHRASE = "correct-horse-battery-staple"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run every test without credvault variables from the outer environment.

    Each variable is set then deleted so monkeypatch unsets it again on
    teardown, including values a test loads from a .env file. The working
    directory moves to tmp_path so no project .env is picked up.
    """
    for name in ("ENCRYPTION_KEY", "ENV", "CREDVAULT_CONFIG"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def passphrase():
    return PASSPHRASE


@pytest.fixture(scope="session")
def qa_encrypted_password():
    """Marked envelope of the QA password under PASSPHRASE."""
    return mark(encrypt_secret("Automation@Tester@1990", PASSPHRASE))


@pytest.fixture
def config_document(qa_encrypted_password):
    """Configuration with one encrypted and two plaintext environments."""
    return {
        "QA": {
            "baseURL": "https://qa.example.com",
            "credentials": {
                "username": "qa.tester@example.com",
                "password": qa_encrypted_password,
            },
            "locale": "en-GB",
        },
        "UAT": {
            "baseURL": "https://uat.example.com",
            "credentials": {
                "username": "uat.tester@example.com",
                "password": "plainPass123",
            },
        },
        "LIVE": {
            "baseURL": "https://www.example.com",
            "credentials": {
                "username": "live.tester@example.com",
                "password": "livePass!",
            },
        },
    }
