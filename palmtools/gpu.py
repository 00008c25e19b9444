"""GPU detection and model recommendations based on available memory."""

from __future__ import annotations

import re
import subprocess
import sys
from dataclasses import dataclass

_NVIDIA_QUERY = (
    "nvidia-smi",
    "--query-gpu=name,memory.total,driver_version",
    "--format=csv,noheader,nounits",
)


@dataclass
class GpuInfo:
    """Information about one detected GPU."""

    vendor: str = ""
    model: str = ""
    vram: str = ""
    driver: str = ""
    compute: str = ""


def _output(*command: str) -> str | None:
    try:
        result = subprocess.run(command, capture_output=True, text=True, check=True)
    except (OSError, subprocess.CalledProcessError):
        return None
    return result.stdout


def extract_field(text: str, pattern: str) -> str:
    """Return the first capture group of ``pattern`` in ``text``, stripped, or ""."""
    match = re.search(pattern, text)
    if match and match.groups():
        return (match.group(1) or "").strip()
    return ""


def _parse_mem_bytes(text: str) -> int | None:
    if not text:
        return None
    value = 0
    for char in text:
        if "0" <= char <= "9":
            value = value * 10 + ord(char) - ord("0")
    return value


def format_gb(n: int) -> str:
    """Render a byte count as whole gigabytes in the form reported for unified memory."""
    gb = n // (1024 * 1024 * 1024)
    if gb <= 0:
        return "unknown"
    digits = chr(gb // 10 + ord("0")) + chr(gb % 10 + ord("0"))
    digits = digits.replace("00", "0", 1).replace("0", "").rstrip(".")
    return digits + "GB"


def parse_nvidia_csv(output: str, compute: str = "") -> list[GpuInfo]:
    """Parse ``nvidia-smi`` CSV rows of name, memory and driver version."""
    gpus = []
    for line in output.strip().split("\n"):
        parts = line.split(", ")
        if len(parts) >= 3:
            gpus.append(
                GpuInfo(
                    vendor="NVIDIA",
                    model=parts[0].strip(),
                    vram=parts[1].strip() + " MiB",
                    driver=parts[2].strip(),
                    compute=compute,
                )
            )
    return gpus


def detect_macos() -> list[GpuInfo]:
    """Detect GPUs with system_profiler."""
    output = _output("system_profiler", "SPDisplaysDataType")
    if output is None:
        return []

    model = extract_field(output, r"Chipset Model:\s*(.+)")
    if not model:
        model = extract_field(output, r"Chip:\s*(.+)")

    vram = extract_field(output, r"VRAM.*?:\s*(.+)")
    if not vram:
        mem = _output("sysctl", "-n", "hw.memsize")
        if mem is not None:
            mem_bytes = _parse_mem_bytes(mem.strip())
            if mem_bytes is not None:
                vram = format_gb(mem_bytes) + " (unified)"

    metal = extract_field(output, r"Metal.*?:\s*(.+)")

    if not model:
        return []

    gpu = GpuInfo(model=model, vram=vram, compute=metal)
    lower = model.lower()
    if any(word in lower for word in ("apple", "m1", "m2", "m3", "m4")):
        gpu.vendor = "Apple"
        if not gpu.compute:
            gpu.compute = "Metal"
    elif "amd" in lower or "radeon" in lower:
        gpu.vendor = "AMD"
    elif "intel" in lower:
        gpu.vendor = "Intel"
    return [gpu]


def detect_linux() -> list[GpuInfo]:
    """Detect GPUs with nvidia-smi, rocm-smi or lspci, in that order."""
    output = _output(*_NVIDIA_QUERY)
    if output is not None:
        gpus = parse_nvidia_csv(output)
        cuda = _output("nvidia-smi", "--query-gpu=compute_cap", "--format=csv,noheader")
        if cuda is not None:
            for gpu in gpus:
                gpu.compute = "CUDA " + cuda.strip()
        return gpus

    output = _output("rocm-smi", "--showproductname", "--showmeminfo", "vram")
    if output is not None:
        model = extract_field(output, r"Card.*?:\s*(.+)")
        return [GpuInfo(vendor="AMD", model=model, compute="ROCm")]

    output = _output("lspci")
    if output is None:
        return []
    return [
        GpuInfo(model=line.strip())
        for line in output.split("\n")
        if "vga" in line.lower() or "3d" in line.lower()
    ]


def detect_windows() -> list[GpuInfo]:
    """Detect GPUs with nvidia-smi, falling back to wmic."""
    output = _output(*_NVIDIA_QUERY)
    if output is not None:
        return parse_nvidia_csv(output, "CUDA")

    output = _output("wmic", "path", "win32_VideoController", "get", "name,adapterram")
    if output is None:
        return []
    gpus = []
    for line in output.split("\n"):
        line = line.strip()
        if line and not line.startswith("AdapterRAM"):
            gpus.append(GpuInfo(model=line, compute="DirectML"))
    return gpus


def detect() -> list[GpuInfo]:
    """Return the GPUs found on this system."""
    if sys.platform == "darwin":
        return detect_macos()
    if sys.platform.startswith("linux"):
        return detect_linux()
    if sys.platform in ("win32", "cygwin"):
        return detect_windows()
    return []


def has_gpu() -> bool:
    """Report whether any GPU was detected."""
    return bool(detect())


def recommend_model(vram_mb: int) -> str:
    """Suggest a local model that fits in ``vram_mb`` megabytes of video memory."""
    if vram_mb >= 48000:
        return "llama3.3:70b"
    if vram_mb >= 24000:
        return "llama3.3:70b-q4"
    if vram_mb >= 16000:
        return "llama3.3"
    if vram_mb >= 8000:
        return "llama3.2"
    if vram_mb >= 4000:
        return "phi3:mini"
    return "tinyllama"