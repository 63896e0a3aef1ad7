import sys
import os
import io
import logging
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from main import format_decimal, main, resolve_log_level, write_accounts
from models import ClientAccount


class TestFormatDecimal:
    def test_strips_trailing_zeros(self):
        assert format_decimal(Decimal("1.5000")) == "1.5"
        assert format_decimal(Decimal("100")) == "100"
        assert format_decimal(Decimal("0.0000")) == "0"

    def test_rounds_to_four_places(self):
        assert format_decimal(Decimal("1.23456")) == "1.2346"
        assert format_decimal(Decimal("0.00005")) == "0"


class TestWriteAccounts:
    def test_output_sorted_with_header(self):
        out = io.StringIO()
        write_accounts([
            ClientAccount(client_id=2, available=Decimal("0"), held=Decimal("1.0")),
            ClientAccount(client_id=1, available=Decimal("1.5"), locked=True),
        ], out)

        assert out.getvalue().splitlines() == [
            "client,available,held,total,locked",
            "1,1.5,0,1.5,true",
            "2,0,1,1,false",
        ]


class TestMain:
    def test_end_to_end(self, tmp_path, capsys):
        csv_file = tmp_path / "transactions.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 1, 1, 1.0",
            "deposit, 2, 2, 2.0",
            "deposit, 1, 3, 2.0",
            "withdrawal, 1, 4, 1.5",
            "withdrawal, 2, 5, 3.0",
        ]))

        assert main([str(csv_file)]) == 0

        captured = capsys.readouterr()
        assert captured.out.splitlines() == [
            "client,available,held,total,locked",
            "1,1.5,0,1.5,false",
            "2,2,0,2,false",
        ]
        assert "Processed: 4, Failed: 1, Skipped: 0" in captured.err

    def test_usage(self, capsys):
        assert main([]) == 1
        assert "Usage" in capsys.readouterr().err

    def test_missing_file(self, tmp_path):
        assert main([str(tmp_path / "missing.csv")]) == 1

    def test_bad_bytes_and_oversized_field_still_write_snapshot(self, tmp_path, capsys):
        csv_file = tmp_path / "messy.csv"
        csv_file.write_bytes(b"\n".join([
            b"type,client,tx,amount",
            b"deposit,1,1,\xff\xfe",
            b"deposit,1,2," + b"9" * 200000,
            b"deposit,1,3,4.5",
        ]))

        assert main([str(csv_file)]) == 0

        captured = capsys.readouterr()
        assert captured.out.splitlines()[1:] == ["1,4.5,0,4.5,false"]
        assert "Processed: 1, Failed: 0, Skipped: 2" in captured.err

    def test_unknown_log_level_falls_back(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("LOG_LEVEL", "verbose")
        csv_file = tmp_path / "transactions.csv"
        csv_file.write_text("type,client,tx,amount\ndeposit,1,1,2\n")

        assert main([str(csv_file)]) == 0
        assert capsys.readouterr().out.splitlines()[1] == "1,2,0,2,false"


class TestResolveLogLevel:
    def test_known_names(self):
        assert resolve_log_level("debug") == logging.DEBUG
        assert resolve_log_level(" Info ") == logging.INFO
        assert resolve_log_level("WARNING") == logging.WARNING

    def test_unknown_name(self):
        assert resolve_log_level("verbose") is None
        assert resolve_log_level("") is None
