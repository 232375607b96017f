# firmware/io.py
from __future__ import annotations
from pathlib import Path
from .map import FIRST_BLOCK_SKIP, FIRST_CHUNK_SIZE, PAYLOAD_SIZE, RP2040, UF2Format
from .uf2 import encode, serialize

# ---- Сборка входного образа: boot2 + программа ----
def build_input_image(bootloader: bytes, program: bytes) -> bytes:
    """
    boot2 дополняется нулями до границы 256 байт (но не меньше 256),
    затем дописывается программа.
    """
    size = max(FIRST_BLOCK_SKIP, -(-len(bootloader) // PAYLOAD_SIZE) * PAYLOAD_SIZE)
    return bytes(bootloader).ljust(size, b"\x00") + bytes(program)

def check_bootloader(bootloader: bytes) -> list[str]:
    # Лимит 252 байта только документируется, сборку не останавливаем
    if len(bootloader) > FIRST_CHUNK_SIZE:
        return [
            f"boot2 занимает {len(bootloader)} байт, в первый блок попадут только "
            f"{FIRST_CHUNK_SIZE}, байты {FIRST_CHUNK_SIZE}..{len(bootloader) - 1} не войдут под CRC"
        ]
    return []

# ---- Высокоуровневая операция ----
def build_uf2(boot_path: Path, prog_path: Path, out_path: Path, fmt: UF2Format = RP2040) -> dict:
    boot_path, prog_path, out_path = Path(boot_path), Path(prog_path), Path(out_path)
    bootloader = boot_path.read_bytes()
    program = prog_path.read_bytes()

    image = encode(build_input_image(bootloader, program), fmt)
    data = serialize(image)

    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(data)

    crc = int.from_bytes(image.blocks[0].data[FIRST_CHUNK_SIZE:FIRST_BLOCK_SKIP], "little")
    return {
        "blocks": image.block_count,
        "bytes": len(data),
        "bootloader_bytes": len(bootloader),
        "program_bytes": len(program),
        "crc32": f"0x{crc:08X}",
        "family": fmt.name,
        "out": str(out_path),
        "warnings": check_bootloader(bootloader),
    }
