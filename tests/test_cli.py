"""Tests for CLI module."""
import json
import subprocess
import sys
from unittest.mock import patch

import pytest

from shop_ledger import cli
from shop_ledger._version import __version__


@pytest.fixture
def backup_file(tmp_path, monkeypatch):
    """A legacy backup in an otherwise empty working directory."""
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "inventory_backup.txt"
    path.write_text("2 pot 10.00 1\n1 tea 2.50 4\n")
    return path


class TestVersion:
    """Tests for --version option."""

    def test_version_option_exits_with_version(self):
        result = subprocess.run(
            [sys.executable, "-m", "shop_ledger.cli", "--version"],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0
        assert __version__ in result.stdout

    def test_version_short_option(self):
        result = subprocess.run(
            [sys.executable, "-m", "shop_ledger.cli", "-V"],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0
        assert __version__ in result.stdout


class TestReadCommands:
    """Tests for list, find, total and bill."""

    def test_list_restores_in_reverse_file_order(self, backup_file, capsys):
        assert cli.main(["list"]) == 0

        out = capsys.readouterr().out
        assert out.index("tea") < out.index("pot")

    def test_list_missing_backup(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)

        assert cli.main(["list"]) == 1
        assert "Backup file not found" in capsys.readouterr().out

    def test_list_empty_backup(self, backup_file, capsys):
        backup_file.write_text("")

        assert cli.main(["list"]) == 0
        assert "Inventory is empty." in capsys.readouterr().out

    def test_backup_option(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        other = tmp_path / "store.txt"
        other.write_text("5 cup 0.99 12\n")

        assert cli.main(["--backup", str(other), "list"]) == 0
        assert "cup" in capsys.readouterr().out

    def test_find(self, backup_file, capsys):
        assert cli.main(["find", "1"]) == 0
        assert "tea" in capsys.readouterr().out

    def test_find_missing(self, backup_file, capsys):
        assert cli.main(["find", "9"]) == 1
        assert "Product with ID 9 not found" in capsys.readouterr().out

    def test_total(self, backup_file, capsys):
        assert cli.main(["total"]) == 0
        assert "Total Sales: 20.00" in capsys.readouterr().out

    def test_bill(self, backup_file, capsys):
        assert cli.main(["bill", "24", "3", "2024"]) == 0

        out = capsys.readouterr().out
        assert "Bill generated on 24/3/2024:" in out
        assert "20.00" in out

    def test_truncated_backup_warns(self, backup_file, capsys):
        backup_file.write_text("1 tea 2.50 4\n2 pot\n")

        assert cli.main(["total"]) == 0

        captured = capsys.readouterr()
        assert "Total Sales: 10.00" in captured.out
        assert "Stopped reading" in captured.err

    def test_strict_rejects_truncated_backup(self, backup_file, capsys):
        backup_file.write_text("1 tea 2.50 4\n2 pot\n")

        assert cli.main(["--strict", "total"]) == 1
        assert "Malformed snapshot record #2" in capsys.readouterr().out


class TestConvertCommand:
    """Tests for convert_command."""

    def test_convert_to_json_keeps_order(self, backup_file, tmp_path):
        output = tmp_path / "backup.json"

        assert cli.main(["convert", "--to", "json", "--output", str(output)]) == 0

        data = json.loads(output.read_text())
        assert [p["id"] for p in data["products"]] == [2, 1]
        assert data["products"][1]["price"] == "2.50"

    def test_convert_in_place_and_back(self, backup_file):
        original = backup_file.read_text()

        assert cli.main(["convert", "--to", "json"]) == 0
        assert backup_file.read_text().startswith("{")

        assert cli.main(["convert", "--to", "text"]) == 0
        assert backup_file.read_text() == original

    def test_convert_missing_backup(self, tmp_path):
        result = cli.convert_command(tmp_path / "missing.txt", "json")
        assert result == 1


class TestShellCommand:
    """Tests for the interactive shell entry point."""

    def test_shell_is_default_command(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)

        with patch('builtins.input', side_effect=["0"]):
            assert cli.main([]) == 0

        assert "Inventory Management System" in capsys.readouterr().out

    def test_shell_restore(self, backup_file, capsys):
        with patch('builtins.input', side_effect=["5", "0"]):
            assert cli.main(["shell", "--restore"]) == 0

        out = capsys.readouterr().out
        assert "Restored 2 products" in out
        assert "Total Sales: 20.00" in out

    def test_shell_restore_missing_backup(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert cli.main(["shell", "--restore"]) == 1

    def test_shell_bad_access_code(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SHOP_LEDGER_MANAGEMENT__ACCESS_CODE", "abc")

        assert cli.main(["shell"]) == 1
        assert "Configuration error" in capsys.readouterr().out

    def test_shell_restore_latin1_backup(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "inventory_backup.txt").write_bytes(b"1 Caf\xe9 2.50 4\n")

        with patch('builtins.input', side_effect=["5", "0"]):
            assert cli.main(["shell", "--restore"]) == 0

        assert "Total Sales: 10.00" in capsys.readouterr().out


class TestConfigCommand:
    """Tests for config_command."""

    def test_config_shows_defaults(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)

        assert cli.config_command(show=True) == 0

        out = capsys.readouterr().out
        assert '"backup_file"' in out

    def test_config_path_with_local_file(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        config_file = tmp_path / "shop-ledger.json"
        config_file.write_text('{"backup_file": "store.txt"}')

        assert cli.config_command(show_path=True) == 0
        assert str(config_file) in capsys.readouterr().out

    def test_numeric_backup_file_from_env(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SHOP_LEDGER_BACKUP_FILE", "2024")
        (tmp_path / "2024").write_text("5 cup 0.99 12\n")

        assert cli.main(["list"]) == 0
        assert "cup" in capsys.readouterr().out

    def test_backup_file_from_config(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "shop-ledger.json").write_text('{"backup_file": "store.txt"}')
        (tmp_path / "store.txt").write_text("5 cup 0.99 12\n")

        assert cli.main(["list"]) == 0
        assert "cup" in capsys.readouterr().out
