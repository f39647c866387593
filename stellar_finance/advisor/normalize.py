# stellar_finance/advisor/normalize.py
from __future__ import annotations
import re
from typing import Dict, Optional, Tuple

from rapidfuzz import process, fuzz
from unidecode import unidecode


# -----------------------------------------------------------------------------
# Normalización básica
# -----------------------------------------------------------------------------
def norm_txt(s: str | None) -> str:
    """
    Normaliza texto: quita acentos, baja a minúsculas, cambia signos por
    espacios y colapsa espacios.
    "Off-road & Hauling" -> "off road and hauling"
    """
    s = unidecode(s or "")
    s = s.strip().lower().replace("&", " and ")
    s = re.sub(r"[^a-z0-9+<]+", " ", s)
    s = re.sub(r"\s+", " ", s)
    return s.strip()


# -----------------------------------------------------------------------------
# Fuzzy matching: etiquetas tolerantes a typos
# -----------------------------------------------------------------------------
def fuzzy_best(q: str | None, choices: list[str], score_cutoff: int = 85) -> Tuple[str | None, int]:
    if not q or not choices:
        return None, 0
    m = process.extractOne(q, choices, scorer=fuzz.ratio, score_cutoff=score_cutoff)
    return (m[0], int(m[1])) if m else (None, 0)


def parse_choice(raw: str | None, table: Dict[str, str], score_cutoff: int = 85) -> Optional[str]:
    """
    Resuelve una etiqueta escrita a mano contra una tabla {clave: etiqueta}.
    Orden:
      1) clave exacta ("GOOD", "good")
      2) etiqueta exacta normalizada ("Good (690-719)", "good 690 719")
      3) prefijo de la etiqueta ("good" -> "Good (690-719)")
      4) fuzzy sobre las etiquetas ("eco concious" -> "Eco-Conscious")
    Devuelve la clave o None.
    """
    q = norm_txt(raw)
    if not q:
        return None

    by_key = {norm_txt(k): k for k in table}
    if q in by_key:
        return by_key[q]

    by_label = {norm_txt(label): key for key, label in table.items()}
    if q in by_label:
        return by_label[q]

    prefixed = [key for lab, key in by_label.items() if lab.startswith(q + " ") or lab.split(" ")[0] == q]
    if len(prefixed) == 1:
        return prefixed[0]

    best, _ = fuzzy_best(q, list(by_label), score_cutoff=score_cutoff)
    return by_label[best] if best else None
