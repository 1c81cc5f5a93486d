from datetime import datetime

import httpx

from fxquote.client import append_quote, run

URL = "http://gateway.test/cotacao"


def test_success_appends_line(tmp_path):
    output = tmp_path / "cotacao.txt"
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"bidPrice": "5.2097"}))

    assert run(URL, 0.3, output, transport=transport) == 0
    assert run(URL, 0.3, output, transport=transport) == 0

    lines = output.read_text().splitlines()
    assert len(lines) == 2
    stamp, price = lines[0].split("\t")
    assert price == "5.2097"
    assert stamp


def test_timeout_writes_nothing(tmp_path, caplog):
    output = tmp_path / "cotacao.txt"

    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    assert run(URL, 0.3, output, transport=httpx.MockTransport(handler)) == 1
    assert not output.exists()
    assert "Timeout while getting quote" in caplog.text


def test_server_error_writes_nothing(tmp_path):
    output = tmp_path / "cotacao.txt"
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="Error: timeout while getting quote"))

    assert run(URL, 0.3, output, transport=transport) == 1
    assert not output.exists()


def test_line_format(tmp_path):
    output = tmp_path / "cotacao.txt"
    append_quote(output, "5.21", now=datetime(2023, 10, 6, 11, 10, 23))
    assert output.read_text() == "Fri Oct  6 11:10:23 2023\t5.21\n"
