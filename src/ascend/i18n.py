"""Display strings for ascend, keyed by locale and stable id.

Thresholds and ids live in ranks.py / badges.py; only text lives here.
Unknown locales and missing keys fall back to English.
"""

from __future__ import annotations

DEFAULT_LANGUAGE = "en"
LANGUAGES: tuple[str, ...] = ("en", "id", "es")

_STRINGS: dict[str, dict[str, str]] = {
    "en": {
        "rank.recruit": "Recruit",
        "rank.novice": "Novice",
        "rank.apprentice": "Apprentice",
        "rank.warrior": "Warrior",
        "rank.knight": "Knight",
        "rank.master": "Master",
        "rank.grandmaster": "Grandmaster",
        "rank.legend": "Legend",
        "rank.immortal": "Immortal",
        "badge.seed.name": "Seed",
        "badge.seed.description": "The first 24 hours of freedom.",
        "badge.sprout.name": "Sprout",
        "badge.sprout.description": "Three days of discipline.",
        "badge.sapling.name": "Sapling",
        "badge.sapling.description": "One full week of strength.",
        "badge.tree.name": "Tree",
        "badge.tree.description": "Two weeks of neural healing.",
        "badge.forest.name": "Forest",
        "badge.forest.description": "One month of self-mastery.",
        "badge.mountain.name": "Mountain",
        "badge.mountain.description": "Two months of unwavering focus.",
        "badge.sky.name": "Sky",
        "badge.sky.description": "The standard reboot milestone.",
        "badge.space.name": "Space",
        "badge.space.description": "Six months of total transformation.",
        "badge.universe.name": "Universe",
        "badge.universe.description": "One year of absolute freedom.",
        "benefit.1.title": "Androgen Receptors Reset",
        "benefit.1.description": "Your brain starts to recover from overstimulation.",
        "benefit.3.title": "Increased Energy",
        "benefit.3.description": "Testosterone levels begin to stabilize and energy rises.",
        "benefit.7.title": "Testosterone Peak",
        "benefit.7.description": "Studies show a significant spike in testosterone levels around day 7.",
        "benefit.14.title": "Mental Clarity",
        "benefit.14.description": "Brain fog begins to lift. Focus and concentration improve.",
        "benefit.30.title": "Dopamine Sensitivity",
        "benefit.30.description": "You start finding joy in simple things again.",
        "benefit.90.title": "Full Reboot",
        "benefit.90.description": "The standard 'reboot' period. Neural pathways are significantly rewired.",
        "relapse.no_note": "No note provided",
    },
    "id": {
        "rank.recruit": "Rekrut",
        "rank.novice": "Pemula",
        "rank.apprentice": "Murid",
        "rank.warrior": "Pejuang",
        "rank.knight": "Ksatria",
        "rank.master": "Master",
        "rank.grandmaster": "Grandmaster",
        "rank.legend": "Legenda",
        "rank.immortal": "Abadi",
        "badge.seed.name": "Benih",
        "badge.seed.description": "24 jam pertama kebebasan.",
        "badge.sprout.name": "Tunas",
        "badge.sprout.description": "Tiga hari disiplin.",
        "badge.sapling.name": "Pohon Muda",
        "badge.sapling.description": "Satu minggu penuh kekuatan.",
        "badge.tree.name": "Pohon",
        "badge.tree.description": "Dua minggu penyembuhan saraf.",
        "badge.forest.name": "Hutan",
        "badge.forest.description": "Satu bulan penguasaan diri.",
        "badge.mountain.name": "Gunung",
        "badge.mountain.description": "Dua bulan fokus yang tak tergoyahkan.",
        "badge.sky.name": "Langit",
        "badge.sky.description": "Tonggak sejarah reboot standar.",
        "badge.space.name": "Luar Angkasa",
        "badge.space.description": "Enam bulan transformasi total.",
        "badge.universe.name": "Alam Semesta",
        "badge.universe.description": "Satu tahun kebebasan mutlak.",
        "benefit.1.title": "Reset Reseptor Androgen",
        "benefit.1.description": "Otak Anda mulai pulih dari stimulasi berlebihan.",
        "benefit.3.title": "Peningkatan Energi",
        "benefit.3.description": "Kadar testosteron mulai stabil dan energi meningkat.",
        "benefit.7.title": "Puncak Testosteron",
        "benefit.7.description": "Penelitian menunjukkan lonjakan signifikan kadar testosteron sekitar hari ke-7.",
        "benefit.14.title": "Kejelasan Mental",
        "benefit.14.description": "Kabut otak mulai menghilang. Fokus dan konsentrasi meningkat.",
        "benefit.30.title": "Sensitivitas Dopamin",
        "benefit.30.description": "Anda mulai menemukan kegembiraan dalam hal-hal sederhana lagi.",
        "benefit.90.title": "Reboot Penuh",
        "benefit.90.description": "Periode 'reboot' standar. Jalur saraf terhubung kembali secara signifikan.",
        "relapse.no_note": "Tidak ada catatan",
    },
    "es": {
        "rank.recruit": "Recluta",
        "rank.novice": "Novato",
        "rank.apprentice": "Aprendiz",
        "rank.warrior": "Guerrero",
        "rank.knight": "Caballero",
        "rank.master": "Maestro",
        "rank.grandmaster": "Gran Maestro",
        "rank.legend": "Leyenda",
        "rank.immortal": "Inmortal",
        "badge.seed.name": "Semilla",
        "badge.seed.description": "Las primeras 24 horas de libertad.",
        "badge.sprout.name": "Brote",
        "badge.sprout.description": "Tres días de disciplina.",
        "badge.sapling.name": "Arbolito",
        "badge.sapling.description": "Una semana completa de fuerza.",
        "badge.tree.name": "Árbol",
        "badge.tree.description": "Dos semanas de curación neuronal.",
        "badge.forest.name": "Bosque",
        "badge.forest.description": "Un mes de autodominio.",
        "badge.mountain.name": "Montaña",
        "badge.mountain.description": "Dos meses de enfoque inquebrantable.",
        "badge.sky.name": "Cielo",
        "badge.sky.description": "El hito estándar de reinicio.",
        "badge.space.name": "Espacio",
        "badge.space.description": "Seis meses de transformación total.",
        "badge.universe.name": "Universo",
        "badge.universe.description": "Un año de libertad absoluta.",
        "benefit.1.title": "Reinicio de Receptores de Andrógenos",
        "benefit.1.description": "Tu cerebro comienza a recuperarse de la sobreestimulación.",
        "benefit.3.title": "Aumento de Energía",
        "benefit.3.description": "Los niveles de testosterona comienzan a estabilizarse y la energía aumenta.",
        "benefit.7.title": "Pico de Testosterona",
        "benefit.7.description": "Los estudios muestran un pico significativo en los niveles de testosterona alrededor del día 7.",
        "benefit.14.title": "Claridad Mental",
        "benefit.14.description": "La niebla mental comienza a disiparse. El enfoque y la concentración mejoran.",
        "benefit.30.title": "Sensibilidad a la Dopamina",
        "benefit.30.description": "Comienzas a encontrar alegría en las cosas simples de nuevo.",
        "benefit.90.title": "Reinicio Completo",
        "benefit.90.description": "El período estándar de 'reinicio'. Las vías neuronales se reconectan significativamente.",
        "relapse.no_note": "Sin nota",
    },
}


def normalize_language(language: str | None) -> str:
    """Map 'es-MX' / 'ES' / None to a supported language code."""
    if not language:
        return DEFAULT_LANGUAGE
    code = language.split("-")[0].split("_")[0].lower()
    return code if code in _STRINGS else DEFAULT_LANGUAGE


def text(key: str, language: str | None = None) -> str:
    """Look up a display string. Falls back to English, then to the key itself."""
    table = _STRINGS[normalize_language(language)]
    if key in table:
        return table[key]
    return _STRINGS[DEFAULT_LANGUAGE].get(key, key)


def rank_name(rank_id: str, language: str | None = None) -> str:
    return text(f"rank.{rank_id}", language)


def badge_name(badge_id: str, language: str | None = None) -> str:
    return text(f"badge.{badge_id}.name", language)


def badge_description(badge_id: str, language: str | None = None) -> str:
    return text(f"badge.{badge_id}.description", language)


def benefit_title(days: int, language: str | None = None) -> str:
    return text(f"benefit.{days}.title", language)


def benefit_description(days: int, language: str | None = None) -> str:
    return text(f"benefit.{days}.description", language)


def no_note(language: str | None = None) -> str:
    return text("relapse.no_note", language)
