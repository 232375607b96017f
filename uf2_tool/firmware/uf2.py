# firmware/uf2.py
"""Кодирование образа в формат UF2 для загрузчика RP2040.

Вход - один буфер: загрузчик второй стадии (boot2), дополненный нулями
до 256 байт, и сразу за ним программа. Выход - последовательность
блоков по 512 байт:

* заголовок из восьми слов ``<I`` (магия, флаги, адрес, размер, номер,
  число блоков, family id);
* 476 байт данных, из которых значимы первые 256;
* завершающая магия ``<I``.

Первый блок особый: в нём 252 байта boot2 и CRC32 этих байт.
"""

from __future__ import annotations

import struct
import zlib
from dataclasses import dataclass
from typing import Iterable, Tuple

from .map import (
    CRC_SIZE,
    DATA_SIZE,
    FIRST_BLOCK_SKIP,
    FIRST_CHUNK_SIZE,
    PAYLOAD_SIZE,
    RP2040,
    UF2Format,
)

_HEADER = struct.Struct("<IIIIIIII")
_FOOTER = struct.Struct("<I")


@dataclass(frozen=True)
class Block:
    """Один блок UF2 (512 байт на выходе)."""

    magic0: int
    magic1: int
    flags: int
    target_address: int
    payload_size: int
    block_index: int
    total_blocks: int
    family_id: int
    data: bytes
    magic_end: int

    @classmethod
    def allocate(cls, fmt: UF2Format, target_address: int, block_index: int,
                 total_blocks: int, data: bytes) -> "Block":
        return cls(
            magic0=fmt.magic0,
            magic1=fmt.magic1,
            flags=fmt.flags,
            target_address=target_address,
            payload_size=fmt.payload_size,
            block_index=block_index,
            total_blocks=total_blocks,
            family_id=fmt.family_id,
            data=bytes(data).ljust(DATA_SIZE, b"\x00"),
            magic_end=fmt.magic_end,
        )

    def to_bytes(self) -> bytes:
        header = _HEADER.pack(
            self.magic0,
            self.magic1,
            self.flags,
            self.target_address,
            self.payload_size,
            self.block_index,
            self.total_blocks,
            self.family_id,
        )
        return header + self.data[:DATA_SIZE].ljust(DATA_SIZE, b"\x00") + _FOOTER.pack(self.magic_end)


@dataclass(frozen=True)
class Image:
    blocks: Tuple[Block, ...]

    @property
    def block_count(self) -> int:
        return len(self.blocks)


def iter_chunks(data: bytes | None, chunk_size: int) -> Iterable[bytes]:
    if not data:
        return
    for i in range(0, len(data), chunk_size):
        yield data[i:i+chunk_size]


def block_count_for(length: int) -> int:
    """Число блоков для входа заданной длины (первый блок + куски по 256)."""
    rest = max(0, length - FIRST_BLOCK_SKIP)
    return 1 + (rest + PAYLOAD_SIZE - 1) // PAYLOAD_SIZE


def first_block_payload(data: bytes) -> bytes:
    """252 байта boot2 (с нулями до полного размера) + CRC32 little-endian."""
    chunk = bytes(data[:FIRST_CHUNK_SIZE]).ljust(FIRST_CHUNK_SIZE, b"\x00")
    crc = zlib.crc32(chunk) & 0xFFFFFFFF
    return chunk + crc.to_bytes(CRC_SIZE, "little")


def encode(data: bytes, fmt: UF2Format = RP2040) -> Image:
    total = block_count_for(len(data))
    payloads = [first_block_payload(data)]
    payloads.extend(iter_chunks(data[FIRST_BLOCK_SKIP:], PAYLOAD_SIZE))

    blocks = tuple(
        Block.allocate(fmt, fmt.base_address + i * PAYLOAD_SIZE, i, total, payload)
        for i, payload in enumerate(payloads)
    )
    return Image(blocks)


def serialize(image: Image) -> bytes:
    # все поля little-endian, каждый блок ровно 512 байт
    return b"".join(block.to_bytes() for block in image.blocks)
