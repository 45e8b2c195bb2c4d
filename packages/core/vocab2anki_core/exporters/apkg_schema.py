"""Collection schema and default configuration for native Anki packages.

The package embeds a SQLite collection in the legacy ``collection.anki2``
layout (schema version 11). Tables are declared with SQLAlchemy Core so the
package builder can create and fill them on any engine.

The default configuration payloads (collection config, note type, decks and
scheduling preset) are plain constants; ``build_collection_template`` copies
them and relabels the note type and deck with ids for one export run, so
repeated imports never merge unrelated decks.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Column, Index, Integer, MetaData, Table, Text

SCHEMA_VERSION = 11
COLLECTION_CREATED = 1388548800  # seconds, fixed creation stamp
DEFAULT_DECK_ID = 1
DEFAULT_DCONF_ID = 1

# Separates field values inside notes.flds
FIELD_SEPARATOR = "\x1f"

DEFAULT_QUESTION_FORMAT = "{{Front}}"
DEFAULT_ANSWER_FORMAT = '{{FrontSide}}\n\n<hr id="answer">\n\n{{Back}}'
DEFAULT_CSS = (
    ".card {\n"
    " font-family: arial;\n"
    " font-size: 20px;\n"
    " text-align: center;\n"
    " color: black;\n"
    "background-color: white;\n"
    "}\n"
)

LATEX_PRE = (
    "\\documentclass[12pt]{article}\n"
    "\\special{papersize=3in,5in}\n"
    "\\usepackage[utf8]{inputenc}\n"
    "\\usepackage{amssymb,amsmath}\n"
    "\\pagestyle{empty}\n"
    "\\setlength{\\parindent}{0in}\n"
    "\\begin{document}\n"
)
LATEX_POST = "\\end{document}"

metadata = MetaData()

col = Table(
    "col",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("crt", Integer, nullable=False),
    Column("mod", Integer, nullable=False),
    Column("scm", Integer, nullable=False),
    Column("ver", Integer, nullable=False),
    Column("dty", Integer, nullable=False),
    Column("usn", Integer, nullable=False),
    Column("ls", Integer, nullable=False),
    Column("conf", Text, nullable=False),
    Column("models", Text, nullable=False),
    Column("decks", Text, nullable=False),
    Column("dconf", Text, nullable=False),
    Column("tags", Text, nullable=False),
)

notes = Table(
    "notes",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("guid", Text, nullable=False),
    Column("mid", Integer, nullable=False),
    Column("mod", Integer, nullable=False),
    Column("usn", Integer, nullable=False),
    Column("tags", Text, nullable=False),
    Column("flds", Text, nullable=False),
    # Declared integer by Anki; holds the sort field text
    Column("sfld", Integer, nullable=False),
    Column("csum", Integer, nullable=False),
    Column("flags", Integer, nullable=False),
    Column("data", Text, nullable=False),
)

cards = Table(
    "cards",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("nid", Integer, nullable=False),
    Column("did", Integer, nullable=False),
    Column("ord", Integer, nullable=False),
    Column("mod", Integer, nullable=False),
    Column("usn", Integer, nullable=False),
    Column("type", Integer, nullable=False),
    Column("queue", Integer, nullable=False),
    Column("due", Integer, nullable=False),
    Column("ivl", Integer, nullable=False),
    Column("factor", Integer, nullable=False),
    Column("reps", Integer, nullable=False),
    Column("lapses", Integer, nullable=False),
    Column("left", Integer, nullable=False),
    Column("odue", Integer, nullable=False),
    Column("odid", Integer, nullable=False),
    Column("flags", Integer, nullable=False),
    Column("data", Text, nullable=False),
)

revlog = Table(
    "revlog",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("cid", Integer, nullable=False),
    Column("usn", Integer, nullable=False),
    Column("ease", Integer, nullable=False),
    Column("ivl", Integer, nullable=False),
    Column("lastIvl", Integer, nullable=False),
    Column("factor", Integer, nullable=False),
    Column("time", Integer, nullable=False),
    Column("type", Integer, nullable=False),
)

graves = Table(
    "graves",
    metadata,
    Column("usn", Integer, nullable=False),
    Column("oid", Integer, nullable=False),
    Column("type", Integer, nullable=False),
)

Index("ix_notes_usn", notes.c.usn)
Index("ix_cards_usn", cards.c.usn)
Index("ix_revlog_usn", revlog.c.usn)
Index("ix_cards_nid", cards.c.nid)
Index("ix_cards_sched", cards.c.did, cards.c.queue, cards.c.due)
Index("ix_revlog_cid", revlog.c.cid)
Index("ix_notes_csum", notes.c.csum)


DEFAULT_CONF: dict[str, Any] = {
    "nextPos": 1,
    "estTimes": True,
    "activeDecks": [DEFAULT_DECK_ID],
    "sortType": "noteFld",
    "timeLim": 0,
    "sortBackwards": False,
    "addToCur": True,
    "curDeck": DEFAULT_DECK_ID,
    "newBury": True,
    "newSpread": 0,
    "dueCounts": True,
    "curModel": None,
    "collapseTime": 1200,
}

DEFAULT_DECK: dict[str, Any] = {
    "desc": "",
    "name": "Default",
    "extendRev": 50,
    "usn": 0,
    "collapsed": False,
    "newToday": [0, 0],
    "timeToday": [0, 0],
    "dyn": 0,
    "extendNew": 10,
    "conf": DEFAULT_DCONF_ID,
    "revToday": [0, 0],
    "lrnToday": [0, 0],
    "id": DEFAULT_DECK_ID,
    "mod": 1435645724,
}

# Relabelled per export: name, id, mod
TEMPLATE_DECK: dict[str, Any] = {
    "desc": "",
    "name": "Template",
    "extendRev": 50,
    "usn": -1,
    "collapsed": False,
    "newToday": [0, 0],
    "timeToday": [0, 0],
    "dyn": 0,
    "extendNew": 10,
    "conf": DEFAULT_DCONF_ID,
    "revToday": [0, 0],
    "lrnToday": [0, 0],
    "id": None,
    "mod": 0,
}

# Relabelled per export: name, id, did, mod, templates, css
TEMPLATE_MODEL: dict[str, Any] = {
    "vers": [],
    "name": "Basic",
    "tags": [],
    "did": None,
    "usn": -1,
    "req": [[0, "all", [0]]],
    "flds": [
        {"name": "Front", "media": [], "sticky": False, "rtl": False, "ord": 0, "font": "Arial", "size": 20},
        {"name": "Back", "media": [], "sticky": False, "rtl": False, "ord": 1, "font": "Arial", "size": 20},
    ],
    "sortf": 0,
    "latexPre": LATEX_PRE,
    "tmpls": [
        {
            "name": "Card 1",
            "qfmt": DEFAULT_QUESTION_FORMAT,
            "did": None,
            "bafmt": "",
            "afmt": DEFAULT_ANSWER_FORMAT,
            "ord": 0,
            "bqfmt": "",
        }
    ],
    "latexPost": LATEX_POST,
    "type": 0,
    "id": None,
    "css": DEFAULT_CSS,
    "mod": 0,
}

DEFAULT_DCONF: dict[str, Any] = {
    "name": "Default",
    "replayq": True,
    "lapse": {"leechFails": 8, "minInt": 1, "delays": [10], "leechAction": 0, "mult": 0},
    "rev": {"perDay": 100, "fuzz": 0.05, "ivlFct": 1, "maxIvl": 36500, "ease4": 1.3, "bury": True, "minSpace": 1},
    "timer": 0,
    "maxTaken": 60,
    "usn": 0,
    "new": {
        "perDay": 20,
        "delays": [1, 10],
        "separate": True,
        "ints": [1, 4, 7],
        "initialFactor": 2500,
        "bury": True,
        "order": 1,
    },
    "mod": 0,
    "id": DEFAULT_DCONF_ID,
    "autoplay": True,
}


@dataclass
class CollectionTemplate:
    """The single ``col`` row of a package, with its JSON payloads decoded."""

    deck_id: int
    model_id: int
    created_ms: int
    conf: dict[str, Any] = field(default_factory=dict)
    models: dict[str, Any] = field(default_factory=dict)
    decks: dict[str, Any] = field(default_factory=dict)
    dconf: dict[str, Any] = field(default_factory=dict)

    def to_row(self) -> dict[str, Any]:
        """Column values for inserting into ``col``."""
        return {
            "id": 1,
            "crt": COLLECTION_CREATED,
            "mod": self.created_ms,
            "scm": self.created_ms,
            "ver": SCHEMA_VERSION,
            "dty": 0,
            "usn": 0,
            "ls": 0,
            "conf": json.dumps(self.conf),
            "models": json.dumps(self.models),
            "decks": json.dumps(self.decks),
            "dconf": json.dumps(self.dconf),
            "tags": "{}",
        }


def build_collection_template(
    deck_name: str,
    deck_id: int,
    model_id: int,
    created_ms: int,
    question_format: str = DEFAULT_QUESTION_FORMAT,
    answer_format: str = DEFAULT_ANSWER_FORMAT,
    css: str = DEFAULT_CSS,
) -> CollectionTemplate:
    """Build the collection row for one export.

    The template deck and note type are deep-copied and relabelled with
    ``deck_id``/``model_id``; the built-in ``Default`` deck is kept alongside.

    Args:
        deck_name: Name for the exported deck and its note type
        deck_id: Deck id for this export
        model_id: Note type id for this export
        created_ms: Export start time in milliseconds
        question_format: Card front template
        answer_format: Card back template
        css: Card styling

    Returns:
        Collection template ready to insert
    """
    modified = created_ms // 1000

    deck = copy.deepcopy(TEMPLATE_DECK)
    deck.update(name=deck_name, id=deck_id, mod=modified)

    model = copy.deepcopy(TEMPLATE_MODEL)
    model.update(name=deck_name, id=model_id, did=deck_id, mod=modified, css=css)
    model["tmpls"][0].update(qfmt=question_format, afmt=answer_format)

    conf = copy.deepcopy(DEFAULT_CONF)
    conf.update(curModel=str(model_id), curDeck=deck_id, activeDecks=[deck_id])

    return CollectionTemplate(
        deck_id=deck_id,
        model_id=model_id,
        created_ms=created_ms,
        conf=conf,
        models={str(model_id): model},
        decks={str(DEFAULT_DECK_ID): copy.deepcopy(DEFAULT_DECK), str(deck_id): deck},
        dconf={str(DEFAULT_DCONF_ID): copy.deepcopy(DEFAULT_DCONF)},
    )
