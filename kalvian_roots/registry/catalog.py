"""Static catalog of every family identifier in Juuret Kälviällä, in corpus order."""

FAMILY_IDS: tuple[str, ...] = (
    "HANNILA 1",
    "HANNILA 2",
    "HANNILA 3",
    "HANNILA 4",
    "HANNILA 5",
    "HERLEVI 1",
    "HERLEVI 2",
    "HERLEVI 3",
    "HERLEVI 4",
    "HERLEVI 5",
    "HERLEVI 6",
    "HYYPPÄ 1",
    "HYYPPÄ 2",
    "HYYPPÄ 3",
    "HYYPPÄ 4",
    "HYYPPÄ 5",
    "HYYPPÄ 5A",
    "HYYPPÄ 6",
    "HYYPPÄ 7",
    "HYYPPÄ 8",
    "ISO-HYYPPÄ 1",
    "ISO-HYYPPÄ 2",
    "ISO-HYYPPÄ 3",
    "ISO-HYYPPÄ 4",
    "ISO-HYYPPÄ 5",
    "ISO-HYYPPÄ 6",
    "ISO-HYYPPÄ 7",
    "ISO-HYYPPÄ 8",
    "ISO-HYYPPÄ 9",
    "ISO-HYYPPÄ 10",
    "ISO-HYYPPÄ 11",
    "ISO-PEITSO I 1",
    "ISO-PEITSO I 2",
    "ISO-PEITSO I 3",
    "ISO-PEITSO I 4",
    "ISO-PEITSO II 1",
    "ISO-PEITSO II 2",
    "ISO-PEITSO II 3",
    "ISO-PEITSO III 1",
    "ISO-PEITSO III 2",
    "ISO-PEITSO III 3",
    "JÄNESNIEMI 1",
    "JÄNESNIEMI 2",
    "JÄNESNIEMI 3",
    "JÄNESNIEMI 4",
    "JÄNESNIEMI 5",
    "JÄNESNIEMI 6",
    "KANKKONEN 1",
    "KANKKONEN 2",
    "KANKKONEN 3",
    "KORPELA 1",
    "KORPELA 2",
    "KORPELA 3",
    "KORPELA 4",
    "KORPELA 5",
    "KORPELA 6",
    "KORPI 1",
    "KORPI 2",
    "KORPI 3",
    "KORPI 4",
    "KORPI 5",
    "KORPI 6",
    "KORPI 7",
    "KORPI 8",
    "KORPI 9",
    "KORPI 10",
    "KORPI 11",
    "KORVELA 1",
    "KORVELA 2",
    "KORVELA 3",
    "KORVELA 4",
    "KYKYRI 1",
    "KYKYRI 2",
    "KYKYRI 3",
    "KYKYRI II 1",
    "KYKYRI II 2",
    "KYKYRI II 3",
    "KYKYRI II 4",
    "KYKYRI II 5",
    "KYKYRI II 6",
    "KYKYRI II 7",
    "KYKYRI II 8",
    "KYKYRI II 9",
    "MAUNUMÄKI 1",
    "MAUNUMÄKI 2",
    "MAUNUMÄKI 3",
    "MAUNUMÄKI IV 1",
    "MAUNUMÄKI IV 2",
    "MAUNUMÄKI IV 3",
    "MAUNUMÄKI IV 4",
    "MAUNUMÄKI IV 5",
    "MAUNUMÄKI IV 6",
    "PIENI-PORKOLA 1",
    "PIENI-PORKOLA 2",
    "PIENI-PORKOLA 3",
    "PIENI-PORKOLA 4",
    "PIENI-PORKOLA 5",
    "PIENI-PORKOLA 6",
    "PIETILÄ 1",
    "PIETILÄ 2",
    "PIETILÄ 3",
    "PIETILÄ 4",
    "PIETILÄ 5",
    "PIETILÄ 6",
    "PIETILÄ 7",
    "PIETILÄ 8",
    "RAHKONEN 1",
    "RAHKONEN 2",
    "RAHKONEN 3",
    "RAHKONEN 4",
    "RAHKONEN 5",
    "RAHKONEN 6",
    "RITA 1",
    "RITA 2",
    "RITA 3",
    "RITA 4",
    "RITA 5",
    "RITA 6",
    "RITA 7",
    "RITA 8",
    "RITA 9",
    "RITA 10",
    "SIKALA 1",
    "SIKALA 2",
    "SIKALA 3",
    "SIKALA 4",
    "SIKALA 5",
    "SIKALA 6",
    "TIKKANEN 1",
    "TIKKANEN 2",
    "TIKKANEN 3",
    "TIKKANEN 4",
    "TIKKANEN 5",
    "TIKKANEN 6",
    "VÄHÄ-HYYPPÄ 1",
    "VÄHÄ-HYYPPÄ 2",
    "VÄHÄ-HYYPPÄ 3",
    "VÄHÄ-HYYPPÄ 4",
    "VÄHÄ-HYYPPÄ 5",
    "VÄHÄ-HYYPPÄ 6",
    "VÄHÄ-HYYPPÄ 7",
    "VÄHÄ-HYYPPÄ 8",
)
