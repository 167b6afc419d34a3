import re

from dossier_registry.errors import InvalidSiret

SIRET_LENGTH = 14
SIREN_LENGTH = 9

# La Poste establishments do not follow the Luhn rule.
LA_POSTE_SIREN = "356000000"

_NON_DIGITS = re.compile(r"[^0-9]")


def normalize_siret(raw: str | None) -> str:
    return _NON_DIGITS.sub("", raw or "")


def _luhn_checksum(digits: str) -> int:
    total = 0
    for i, ch in enumerate(reversed(digits)):
        n = int(ch)
        if i % 2 == 1:
            n *= 2
            if n > 9:
                n -= 9
        total += n
    return total % 10


def is_valid_siret(siret: str) -> bool:
    if len(siret) != SIRET_LENGTH or not siret.isdigit():
        return False
    if siret.startswith(LA_POSTE_SIREN):
        return sum(int(ch) for ch in siret) % 5 == 0
    return _luhn_checksum(siret) == 0


def validate_siret(raw: str | None) -> str:
    siret = normalize_siret(raw)
    if not is_valid_siret(siret):
        raise InvalidSiret(f"invalid SIRET: {raw!r}")
    return siret


def siren_of(siret: str) -> str:
    return siret[:SIREN_LENGTH]
