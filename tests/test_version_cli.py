import subprocess, sys, re

import pytest

import asynclog


def run_module(module, *args):
    return subprocess.run([sys.executable, '-m', module, *args], capture_output=True, text=True, timeout=30)


@pytest.mark.parametrize("module", ["asynclog.cli", "asynclog"])
@pytest.mark.parametrize("flag", ["--version", "version"])
def test_every_entry_point_reports_package_version(module, flag):
    proc = run_module(module, flag)
    assert proc.returncode == 0, proc.stderr
    # Expect exactly: asynclog X.Y.Z
    m = re.fullmatch(r'asynclog (\d+\.\d+\.\d+)', proc.stdout.strip())
    assert m, f'Unexpected version output: {proc.stdout!r}'
    assert m.group(1) == asynclog.__version__


def test_version_does_not_start_a_worker():
    # Printing the version must not write log lines or summaries
    proc = run_module('asynclog', 'version')
    assert proc.stderr == ''
    assert '[INFOS]' not in proc.stdout
