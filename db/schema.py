# SQL schema for FlipDeck database

SCHEMA_VERSION = 2

SCHEMA_SQL = """
-- Decks
CREATE TABLE IF NOT EXISTS decks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT UNIQUE NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);

-- Cards
CREATE TABLE IF NOT EXISTS cards (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    deck_id INTEGER NOT NULL,
    question TEXT NOT NULL,
    answer TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    FOREIGN KEY (deck_id) REFERENCES decks (id) ON DELETE CASCADE
);

-- Scheduling state (absent until a card's first rating)
CREATE TABLE IF NOT EXISTS scheduling_states (
    card_id INTEGER PRIMARY KEY,
    ease_factor REAL NOT NULL DEFAULT 2.5 CHECK(ease_factor >= 1.3),
    interval_days INTEGER NOT NULL DEFAULT 1 CHECK(interval_days >= 1),
    repetitions INTEGER NOT NULL DEFAULT 0 CHECK(repetitions >= 0),
    next_review_date TEXT NOT NULL DEFAULT (date('now')),
    FOREIGN KEY (card_id) REFERENCES cards (id) ON DELETE CASCADE
);

-- Attachment metadata
CREATE TABLE IF NOT EXISTS attachments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    card_id INTEGER NOT NULL,
    type TEXT NOT NULL CHECK(type IN ('image', 'pdf', 'document')),
    uri TEXT NOT NULL,
    name TEXT NOT NULL,
    mime_type TEXT,
    size INTEGER,
    FOREIGN KEY (card_id) REFERENCES cards (id) ON DELETE CASCADE
);

-- Revision log (append-only)
CREATE TABLE IF NOT EXISTS revisions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    card_id INTEGER NOT NULL,
    date TEXT NOT NULL DEFAULT (date('now')),
    outcome TEXT NOT NULL CHECK(outcome IN ('correct', 'incorrect')),
    FOREIGN KEY (card_id) REFERENCES cards (id) ON DELETE CASCADE
);

-- Card search (FTS5)
CREATE VIRTUAL TABLE IF NOT EXISTS cards_fts USING fts5(
    question,
    answer,
    content='cards',
    content_rowid='id'
);

CREATE TRIGGER IF NOT EXISTS cards_ai AFTER INSERT ON cards BEGIN
    INSERT INTO cards_fts(rowid, question, answer)
    VALUES (new.id, new.question, new.answer);
END;

CREATE TRIGGER IF NOT EXISTS cards_ad AFTER DELETE ON cards BEGIN
    INSERT INTO cards_fts(cards_fts, rowid, question, answer)
    VALUES ('delete', old.id, old.question, old.answer);
END;

CREATE TRIGGER IF NOT EXISTS cards_au AFTER UPDATE ON cards BEGIN
    INSERT INTO cards_fts(cards_fts, rowid, question, answer)
    VALUES ('delete', old.id, old.question, old.answer);
    INSERT INTO cards_fts(rowid, question, answer)
    VALUES (new.id, new.question, new.answer);
END;
"""

# Indexes for performance
INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_cards_deck ON cards (deck_id);
CREATE INDEX IF NOT EXISTS idx_scheduling_next_review ON scheduling_states (next_review_date);
CREATE INDEX IF NOT EXISTS idx_attachments_card ON attachments (card_id);
CREATE INDEX IF NOT EXISTS idx_revisions_card ON revisions (card_id);
CREATE INDEX IF NOT EXISTS idx_revisions_date ON revisions (date);
"""
