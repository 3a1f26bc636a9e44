from chart_collage import cli
from chart_collage.capture.client import CollageClientError
from chart_collage.core.models import Artifact


class StubClient:
    def __init__(self, url):
        self.url = url

    def submit(self, batch):
        assert len(batch) == 4
        return Artifact(id="c/1", url="https://example.com/c/1.png", width=800, height=800)

    def list_collages(self):
        raise CollageClientError("down")


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_generate_submits_demo_charts(monkeypatch, capsys):
    monkeypatch.setattr("chart_collage.capture.client.CollageClient", StubClient)

    assert cli.main(["generate", "--size", "100"]) == 0
    assert "c/1\t800x800" in capsys.readouterr().out


def test_list_reports_failure(monkeypatch):
    monkeypatch.setattr("chart_collage.capture.client.CollageClient", StubClient)

    assert cli.main(["list"]) == 1
