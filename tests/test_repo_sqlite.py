# tests/test_repo_sqlite.py
# -*- coding: utf-8 -*-
"""
Tests d'intégration pour la couche persistence (SQLite/SQLAlchemy).

Ce fichier couvre :
- initialisation d'une base temporaire par exécution (DB_URL -> tmp file),
- création utilisateur, unicité email (StoreError), noms affichés,
- CRUD des nuits avec recalcul systématique de duration/score,
- contrainte 1 nuit par jour et par utilisateur,
- NotFoundError sur id inconnu ou appartenant à un autre utilisateur,
- requêtes par plage, ordre, multi-utilisateurs,
- persistance de l'état des badges (upsert),
- liste d'amis (ajout symétrique, idempotent, suppression).

Architecture ciblée :
sleepquest/persistence/db.py
sleepquest/persistence/models.py
sleepquest/persistence/repositories/*.py
"""

import datetime as dt
import importlib
from dataclasses import dataclass

import pytest

from sleepquest.persistence.errors import DuplicateEntryError, NotFoundError, StoreError
from sleepquest.services.badge_engine import BadgeState
from sleepquest.services.score_engine import Feeling, ValidationError, compute_entry


# ---------------------------------------------------------------------
# FIXTURE PRINCIPALE : repos initialisés sur une DB temporaire
# ---------------------------------------------------------------------

@dataclass
class Repos:
    users: object
    entries: object
    badges: object
    friends: object


@pytest.fixture
def repos(tmp_path, monkeypatch) -> Repos:
    """
    Prépare un environnement propre :
    - crée une base SQLite temporaire
    - définit DB_URL AVANT de (re)charger les modules
    - (re)charge db/models pour régénérer l'engine et les tables
    - instancie les repositories
    """
    db_path = tmp_path / "test_sleepquest.db"
    monkeypatch.setenv("DB_URL", f"sqlite:///{db_path}")

    import sleepquest.persistence.db as db
    import sleepquest.persistence.models as models
    importlib.reload(db)
    importlib.reload(models)

    db.init_db(models.Base, drop_and_recreate=True)

    import sleepquest.persistence.repositories.users_repo as users_repo
    import sleepquest.persistence.repositories.entries_repo as entries_repo
    import sleepquest.persistence.repositories.badges_repo as badges_repo
    import sleepquest.persistence.repositories.friends_repo as friends_repo
    importlib.reload(users_repo)
    importlib.reload(entries_repo)
    importlib.reload(badges_repo)
    importlib.reload(friends_repo)

    return Repos(
        users=users_repo.UserRepository(),
        entries=entries_repo.EntryRepository(),
        badges=badges_repo.BadgeStateRepository(),
        friends=friends_repo.FriendRepository(),
    )


# ---------------------------------------------------------------------
# HELPERS
# ---------------------------------------------------------------------

D0 = dt.date(2025, 1, 1)


def add_days(date: dt.date, n: int) -> dt.date:
    return date + dt.timedelta(days=n)


def log(repos: Repos, user_id: int, day, bedtime="23:00", waketime="07:00", quality=7, feeling="good"):
    return repos.entries.create(user_id, day, bedtime, waketime, quality, feeling)


# ---------------------------------------------------------------------
# TESTS UTILISATEURS
# ---------------------------------------------------------------------

def test_create_and_get_user(repos: Repos):
    u = repos.users.create("User@Example.com", display_name="Sarah")
    assert u.id > 0
    assert u.username == "user"
    got = repos.users.get_by_email("user@example.com")
    assert got is not None
    assert got.id == u.id
    assert repos.users.get(u.id).display_name == "Sarah"


def test_get_or_create_user(repos: Repos):
    u1 = repos.users.get_or_create("a@b.com", display_name="First")
    u2 = repos.users.get_or_create("A@B.com", display_name="Second")
    assert u1.id == u2.id
    assert repos.users.get_by_email("a@b.com").display_name == "First"


def test_unique_email_raises_store_error(repos: Repos):
    repos.users.create("dup@example.com")
    with pytest.raises(StoreError):
        repos.users.create("dup@example.com")


def test_unknown_user(repos: Repos):
    assert repos.users.get_by_email("ghost@example.com") is None
    with pytest.raises(NotFoundError):
        repos.users.get(999)


def test_display_names(repos: Repos):
    a = repos.users.create("a@x.com", display_name="Alex")
    b = repos.users.create("b@x.com")
    assert repos.users.display_names([a.id, b.id, 999]) == {a.id: "Alex", b.id: "b"}
    assert repos.users.display_names([]) == {}


# ---------------------------------------------------------------------
# TESTS NUITS : CRUD & CONTRAINTES
# ---------------------------------------------------------------------

def test_create_computes_duration_and_score(repos: Repos):
    u = repos.users.create("r@example.com")
    rec = log(repos, u.id, D0, "23:00", "07:00", 10, Feeling.AMAZING)
    assert rec.id > 0
    assert rec.duration == pytest.approx(8.0)
    assert rec.score == 100
    assert rec.feeling == "amazing"
    assert rec.created_at is not None and rec.updated_at is not None


def test_round_trip_matches_fresh_computation(repos: Repos):
    u = repos.users.create("rt@example.com")
    log(repos, u.id, D0, "00:45", "06:10", 4, "tired")
    stored = repos.entries.list_by_owner(u.id)[0]
    fresh = compute_entry(stored.bedtime, stored.waketime, stored.quality_rating, stored.feeling)
    assert stored.duration == pytest.approx(fresh.duration)
    assert stored.score == fresh.score


def test_missing_feeling_stored_empty(repos: Repos):
    u = repos.users.create("nofeel@example.com")
    rec = log(repos, u.id, D0, "23:00", "07:00", 5, None)
    assert rec.feeling == ""
    assert rec.score == compute_entry("23:00", "07:00", 5, "okay").score
    assert repos.entries.get(u.id, rec.id).feeling == ""


def test_invalid_input_rejected_before_storage(repos: Repos):
    u = repos.users.create("bad@example.com")
    with pytest.raises(ValidationError):
        log(repos, u.id, D0, bedtime="11pm")
    assert repos.entries.list_by_owner(u.id) == []


def test_one_entry_per_user_and_day(repos: Repos):
    u = repos.users.create("once@day.com")
    other = repos.users.create("other@day.com")
    log(repos, u.id, D0)
    with pytest.raises(DuplicateEntryError):
        log(repos, u.id, "2025-01-01")
    # un autre utilisateur peut enregistrer la même date
    log(repos, other.id, D0)


def test_duplicate_is_a_validation_error():
    assert issubclass(DuplicateEntryError, ValidationError)


def test_update_recomputes_score(repos: Repos):
    u = repos.users.create("upd@example.com")
    rec = log(repos, u.id, D0, "23:00", "07:00", 7, "good")
    updated = repos.entries.update(u.id, rec.id, waketime="04:00", feeling=Feeling.TIRED)
    assert updated.id == rec.id
    assert updated.duration == pytest.approx(5.0)
    assert updated.score == compute_entry("23:00", "04:00", 7, "tired").score
    assert updated.bedtime == "23:00"
    assert repos.entries.get(u.id, rec.id).score == updated.score


def test_update_invalid_leaves_row_untouched(repos: Repos):
    u = repos.users.create("keep@example.com")
    rec = log(repos, u.id, D0)
    with pytest.raises(ValidationError):
        repos.entries.update(u.id, rec.id, quality_rating=42)
    assert repos.entries.get(u.id, rec.id).quality_rating == 7


def test_update_date_to_taken_day(repos: Repos):
    u = repos.users.create("move@example.com")
    log(repos, u.id, D0)
    rec = log(repos, u.id, add_days(D0, 1))
    with pytest.raises(DuplicateEntryError):
        repos.entries.update(u.id, rec.id, date=D0)
    moved = repos.entries.update(u.id, rec.id, date=add_days(D0, 5))
    assert moved.date == add_days(D0, 5)


def test_update_or_delete_unknown_entry(repos: Repos):
    u = repos.users.create("nf@example.com")
    intruder = repos.users.create("intruder@example.com")
    rec = log(repos, u.id, D0)

    with pytest.raises(NotFoundError):
        repos.entries.update(u.id, 999, bedtime="22:00")
    with pytest.raises(NotFoundError):
        repos.entries.delete(u.id, 999)
    # l'id existe mais appartient à un autre utilisateur
    with pytest.raises(NotFoundError):
        repos.entries.delete(intruder.id, rec.id)
    with pytest.raises(NotFoundError):
        repos.entries.get(intruder.id, rec.id)


def test_delete_entry(repos: Repos):
    u = repos.users.create("del@example.com")
    rec = log(repos, u.id, D0)
    repos.entries.delete(u.id, rec.id)
    assert repos.entries.list_by_owner(u.id) == []
    with pytest.raises(NotFoundError):
        repos.entries.delete(u.id, rec.id)


# ---------------------------------------------------------------------
# REQUÊTES : ordre, plage, plusieurs utilisateurs
# ---------------------------------------------------------------------

def test_list_by_owner_order_and_range(repos: Repos):
    u = repos.users.create("range@example.com")
    for i in range(5):
        log(repos, u.id, add_days(D0, i), quality=i + 1)

    newest_first = repos.entries.list_by_owner(u.id)
    assert [r.quality_rating for r in newest_first] == [5, 4, 3, 2, 1]

    rows = repos.entries.list_by_owner(u.id, start=add_days(D0, 1), end=add_days(D0, 3), asc=True)
    assert [r.quality_rating for r in rows] == [2, 3, 4]


def test_list_by_owner_filters_owner(repos: Repos):
    a = repos.users.create("a@example.com")
    b = repos.users.create("b@example.com")
    log(repos, a.id, D0)
    log(repos, b.id, D0)
    log(repos, b.id, add_days(D0, 1))
    assert len(repos.entries.list_by_owner(a.id)) == 1
    assert {r.user_id for r in repos.entries.list_by_owner(b.id)} == {b.id}


def test_list_by_owners(repos: Repos):
    a = repos.users.create("la@example.com")
    b = repos.users.create("lb@example.com")
    c = repos.users.create("lc@example.com")
    log(repos, a.id, D0)
    log(repos, b.id, add_days(D0, 2))
    log(repos, c.id, add_days(D0, 1))

    rows = repos.entries.list_by_owners([a.id, b.id])
    assert [r.user_id for r in rows] == [b.id, a.id]
    assert repos.entries.list_by_owners([]) == []


# ---------------------------------------------------------------------
# ÉTAT DES BADGES
# ---------------------------------------------------------------------

def test_badge_state_save_and_load(repos: Repos):
    u = repos.users.create("badges@example.com")
    assert repos.badges.load(u.id) == []

    states = [
        BadgeState("first_entry", is_earned=True, progress=100.0, earned_date=D0),
        BadgeState("perfect_sleeper", is_earned=False, progress=66.67),
    ]
    repos.badges.save(u.id, states)
    loaded = {s.badge_id: s for s in repos.badges.load(u.id)}
    assert loaded["first_entry"] == states[0]
    assert loaded["perfect_sleeper"] == states[1]


def test_badge_state_upsert(repos: Repos):
    u = repos.users.create("upsert@example.com")
    repos.badges.save(u.id, [BadgeState("perfect_sleeper", progress=33.33)])
    repos.badges.save(u.id, [BadgeState("perfect_sleeper", is_earned=True, progress=100.0, earned_date=D0)])
    loaded = repos.badges.load(u.id)
    assert len(loaded) == 1
    assert loaded[0].is_earned is True
    assert loaded[0].earned_date == D0


# ---------------------------------------------------------------------
# AMIS
# ---------------------------------------------------------------------

def test_add_friend_is_symmetric_and_idempotent(repos: Repos):
    a = repos.users.create("fa@example.com")
    b = repos.users.create("fb@example.com")
    c = repos.users.create("fc@example.com")
    assert repos.friends.list_friend_ids(a.id) == []

    repos.friends.add(a.id, b.id)
    repos.friends.add(a.id, b.id)
    repos.friends.add(b.id, a.id)
    repos.friends.add(a.id, c.id)

    assert repos.friends.list_friend_ids(a.id) == [b.id, c.id]
    assert repos.friends.list_friend_ids(b.id) == [a.id]
    assert repos.friends.list_friend_ids(c.id) == [a.id]


def test_remove_friend_both_ways(repos: Repos):
    a = repos.users.create("ra@example.com")
    b = repos.users.create("rb@example.com")
    repos.friends.add(a.id, b.id)
    repos.friends.remove(b.id, a.id)
    assert repos.friends.list_friend_ids(a.id) == []
    assert repos.friends.list_friend_ids(b.id) == []
    repos.friends.remove(a.id, b.id)  # déjà supprimé : sans effet


def test_add_friend_rejects_self_and_unknown(repos: Repos):
    a = repos.users.create("self@example.com")
    with pytest.raises(ValidationError):
        repos.friends.add(a.id, a.id)
    with pytest.raises(NotFoundError):
        repos.friends.add(a.id, 999)
    assert repos.friends.list_friend_ids(a.id) == []
