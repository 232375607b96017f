# firmware/map.py
from dataclasses import dataclass

# Раскладка блока UF2: 32 байта заголовка + 476 байт данных + 4 байта хвоста
BLOCK_SIZE = 512
HEADER_SIZE = 32
DATA_SIZE = 476
PAYLOAD_SIZE = 256

# Первый блок: 252 байта загрузчика + 4 байта CRC32.
# Пропускаем при этом целое окно 256 байт, байты 252..255 входа теряются.
FIRST_CHUNK_SIZE = 252
CRC_SIZE = 4
FIRST_BLOCK_SKIP = 256

@dataclass(frozen=True)
class UF2Format:
    name: str
    family_id: int
    base_address: int = 0x10000000  # 0x10000000 - Flash, 0x20000000 - RAM
    magic0: int = 0x0A324655
    magic1: int = 0x9E5D5157
    magic_end: int = 0x0AB16F30
    flags: int = 0x00002000  # familyID present
    payload_size: int = PAYLOAD_SIZE


RP2040 = UF2Format("rp2040", family_id=0xE48BFF56)

# Семейство RP2350 пока не проверялось на железе, оставлено для сборок под Pico 2.
FAMILIES = {
    f.name: f
    for f in (
        RP2040,
        UF2Format("absolute", family_id=0xE48BFF57),
        UF2Format("rp2350-arm-s", family_id=0xE48BFF59),
        UF2Format("rp2350-riscv", family_id=0xE48BFF5A),
        UF2Format("rp2350-arm-ns", family_id=0xE48BFF5B),
    )
}


def get_format(name: str) -> UF2Format:
    try:
        return FAMILIES[name.lower()]
    except KeyError:
        raise KeyError(f"Неизвестное семейство {name!r}, доступны: {', '.join(FAMILIES)}") from None
