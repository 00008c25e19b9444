import subprocess
from unittest import mock

import pytest

from palmtools import gpu

GIB = 1024 * 1024 * 1024


@pytest.mark.parametrize(
    "vram, expected",
    [
        (48000, "llama3.3:70b"),
        (24000, "llama3.3:70b-q4"),
        (23999, "llama3.3"),
        (16000, "llama3.3"),
        (8000, "llama3.2"),
        (4000, "phi3:mini"),
        (3999, "tinyllama"),
        (0, "tinyllama"),
    ],
)
def test_recommend_model(vram, expected):
    assert gpu.recommend_model(vram) == expected


def test_extract_field_found_and_missing():
    text = "Graphics:\n  Chipset Model:   Apple M3 Max  \n  Metal Support: Metal 3\n"
    assert gpu.extract_field(text, r"Chipset Model:\s*(.+)") == "Apple M3 Max"
    assert gpu.extract_field(text, r"VRAM.*?:\s*(.+)") == ""


def test_parse_nvidia_csv():
    out = "NVIDIA GeForce RTX 4090, 24564, 550.54\nbroken line\n"
    gpus = gpu.parse_nvidia_csv(out, "CUDA")
    assert len(gpus) == 1
    assert gpus[0].vendor == "NVIDIA"
    assert gpus[0].model == "NVIDIA GeForce RTX 4090"
    assert gpus[0].vram == "24564 MiB"
    assert gpus[0].driver == "550.54"
    assert gpus[0].compute == "CUDA"


def test_format_gb():
    assert gpu.format_gb(0) == "unknown"
    assert gpu.format_gb(16 * GIB) == "16GB"
    assert gpu.format_gb(36 * GIB) == "36GB"


def _fake_run(outputs):
    def run(command, **kwargs):
        key = command[0]
        if key not in outputs:
            raise FileNotFoundError(key)
        return subprocess.CompletedProcess(command, 0, stdout=outputs[key], stderr="")

    return run


def test_detect_linux_nvidia():
    outputs = {"nvidia-smi": "Tesla T4, 15360, 535.1\n"}
    with mock.patch("subprocess.run", side_effect=_fake_run(outputs)):
        gpus = gpu.detect_linux()
    assert [g.model for g in gpus] == ["Tesla T4"]
    assert gpus[0].compute.startswith("CUDA ")


def test_detect_linux_lspci_fallback():
    outputs = {
        "lspci": "00:02.0 VGA compatible controller: Example\n00:1f.3 Audio device: Example\n"
    }
    with mock.patch("subprocess.run", side_effect=_fake_run(outputs)):
        gpus = gpu.detect_linux()
    assert len(gpus) == 1
    assert gpus[0].model == "00:02.0 VGA compatible controller: Example"
    assert gpus[0].vendor == ""


def test_detect_linux_nothing():
    with mock.patch("subprocess.run", side_effect=_fake_run({})):
        assert gpu.detect_linux() == []


def test_detect_macos_apple_unified_memory():
    outputs = {
        "system_profiler": "Chipset Model: Apple M2\n",
        "sysctl": f"{16 * GIB}\n",
    }
    with mock.patch("subprocess.run", side_effect=_fake_run(outputs)):
        gpus = gpu.detect_macos()
    assert len(gpus) == 1
    assert gpus[0].vendor == "Apple"
    assert gpus[0].compute == "Metal"
    assert gpus[0].vram == "16GB (unified)"


def test_detect_windows_wmic():
    outputs = {"wmic": "AdapterRAM  Name\nExample Adapter\n\n"}
    with mock.patch("subprocess.run", side_effect=_fake_run(outputs)):
        gpus = gpu.detect_windows()
    assert [g.model for g in gpus] == ["Example Adapter"]
    assert gpus[0].compute == "DirectML"