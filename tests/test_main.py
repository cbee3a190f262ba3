"""Command line entry point: exit codes and output."""

import pytest
import yaml

import main as cli
from pow_core.constants import DIGEST_BITS, DEFAULT_LOG_FILE
from pow_core.proof import search, verify
from pow_core.random_source import SeededRandomSource
from pow_core import pow_utils


@pytest.fixture(autouse=True)
def in_tmp_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ─── search ──────────────────────────────────────────────────────

def test_search_prints_valid_nonce(capsys):
    assert cli.main(["search", "hello", "--cost", "8", "--meter", "10000000"]) == cli.EXIT_OK
    nonce = pow_utils.parse_nonce_hex(capsys.readouterr().out)
    assert verify(b"hello", nonce, 8)


def test_search_hex_payload(capsys):
    assert cli.main(["search", "00ff10", "--hex-payload", "--cost", "4"]) == cli.EXIT_OK
    nonce = pow_utils.parse_nonce_hex(capsys.readouterr().out)
    assert verify(b"\x00\xff\x10", nonce, 4)


def test_search_budget_exhausted_exit_code(capsys):
    code = cli.main(["search", "hello", "--cost", str(DIGEST_BITS + 1), "--meter", "10"])
    assert code == cli.EXIT_BUDGET_EXHAUSTED
    assert capsys.readouterr().out == ""


def test_search_uses_config_defaults(in_tmp_dir, capsys):
    (in_tmp_dir / "pow.yaml").write_text("puzzle:\n  cost: 5\n  meter: 1000000\n", encoding="utf-8")
    assert cli.main(["search", "cfg"]) == cli.EXIT_OK
    nonce = pow_utils.parse_nonce_hex(capsys.readouterr().out)
    assert verify(b"cfg", nonce, 5)


def test_search_with_timeout_runs_in_worker(capsys):
    code = cli.main(["search", "slow", "--cost", str(DIGEST_BITS + 1), "--meter", str(10 ** 12), "--timeout", "1"])
    assert code == cli.EXIT_TIMEOUT


def test_negative_cost_is_usage_error():
    assert cli.main(["search", "x", "--cost", "-3"]) == cli.EXIT_USAGE


# ─── verify ──────────────────────────────────────────────────────

def test_verify_valid_and_invalid(capsys):
    nonce = search(b"payload", 8, 10_000_000, rng=SeededRandomSource(3))
    nonce_hex = pow_utils.format_nonce_hex(nonce)

    assert cli.main(["verify", "payload", nonce_hex, "--cost", "8"]) == cli.EXIT_OK
    assert capsys.readouterr().out.strip() == "valid"

    assert cli.main(["verify", "payload", nonce_hex, "--cost", str(DIGEST_BITS + 1)]) == cli.EXIT_INVALID
    assert capsys.readouterr().out.strip() == "invalid"


def test_verify_malformed_nonce(capsys):
    assert cli.main(["verify", "payload", "not-hex", "--cost", "0"]) == cli.EXIT_INVALID
    assert capsys.readouterr().out.strip() == "invalid"


# ─── config ──────────────────────────────────────────────────────

def test_init_config_writes_defaults(in_tmp_dir, capsys):
    path = in_tmp_dir / "custom.yaml"
    assert cli.main(["init-config", str(path)]) == cli.EXIT_OK
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert set(data) == {"puzzle", "search", "logging"}
    assert data["logging"]["file"] == DEFAULT_LOG_FILE


def test_bad_config_is_usage_error(in_tmp_dir):
    (in_tmp_dir / "pow.yaml").write_text("puzzle:\n  cost: -5\n", encoding="utf-8")
    assert cli.main(["verify", "p", "00" * 10]) == cli.EXIT_USAGE


def test_keyboard_interrupt_has_its_own_exit_code(monkeypatch):
    def interrupted(args):
        raise KeyboardInterrupt

    monkeypatch.setitem(cli.COMMANDS, "verify", interrupted)
    code = cli.main(["verify", "p", "00" * 10])
    assert code == cli.EXIT_INTERRUPTED == 130
    assert code != cli.EXIT_INVALID


# ─── bench ───────────────────────────────────────────────────────

def test_bench_reports_hashrate(capsys):
    assert cli.main(["bench", "--cost", "4", "--jobs", "2", "--workers", "1"]) == cli.EXIT_OK
    out = capsys.readouterr().out
    assert "found: 2" in out
    assert "pool hashrate" in out


def test_bench_reports_hashrate_per_worker(capsys):
    assert cli.main(["bench", "--cost", "4", "--jobs", "4", "--workers", "2"]) == cli.EXIT_OK
    lines = capsys.readouterr().out.splitlines()
    worker_lines = [line for line in lines if line.startswith("worker ")]
    assert worker_lines
    # One line per worker that served a job, never one per job
    ids = [line.split()[1] for line in worker_lines]
    assert len(ids) == len(set(ids))
    assert set(ids) <= {"0", "1"}
