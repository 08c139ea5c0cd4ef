import pytest

from content_forge import cli
from content_forge import client as client_module


class FakeProxyClient:
    answers = []
    statuses = []

    def __init__(self, base_url, timeout=None):
        self.base_url = base_url

    def submit(self, filename, fileobj):
        assert fileobj.read() == b"%PDF-1.4"
        return self.answers.pop(0)

    def check_status(self, job_id):
        return self.statuses.pop(0)


@pytest.fixture
def brief(tmp_path):
    path = tmp_path / "brief.pdf"
    path.write_bytes(b"%PDF-1.4")
    return str(path)


@pytest.fixture(autouse=True)
def fake_client(monkeypatch):
    monkeypatch.setattr(cli, "ProxyClient", FakeProxyClient)
    FakeProxyClient.answers = []
    FakeProxyClient.statuses = []


def test_sync_link_is_printed(brief, capsys):
    FakeProxyClient.answers.append({"success": True, "data": {"webViewLink": "https://drive.example/doc"}})
    assert cli.main([brief]) == 0
    assert capsys.readouterr().out.strip().endswith("https://drive.example/doc")


def test_job_is_polled_to_completion(brief, capsys):
    FakeProxyClient.answers.append({"success": True, "data": {"jobId": "J"}})
    FakeProxyClient.statuses.extend([{"status": "pending"}, {"status": "completed", "data": {"webViewLink": "L"}}])
    assert cli.main([brief, "--interval", "0"]) == 0
    out = capsys.readouterr().out
    assert "Job J accepted" in out
    assert out.strip().endswith("L")


def test_failed_job_exits_non_zero(brief, capsys):
    FakeProxyClient.answers.append({"success": True, "data": {"jobId": "J"}})
    FakeProxyClient.statuses.append({"status": "failed"})
    assert cli.main([brief, "--interval", "0"]) == 1
    assert "Processing failed" in capsys.readouterr().err


def test_non_pdf_is_rejected(tmp_path, capsys):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    assert cli.main([str(path)]) == 2
    assert "Please select a valid PDF file" in capsys.readouterr().err


def test_missing_file(tmp_path):
    assert cli.main([str(tmp_path / "absent.pdf")]) == 2


def test_host_without_scheme_exits_non_zero(brief, capsys, monkeypatch):
    monkeypatch.setattr(cli, "ProxyClient", client_module.ProxyClient)
    assert cli.main([brief, "--host", "localhost:8000"]) == 1
    assert "Upload request failed" in capsys.readouterr().err
