# registrar/services/matricule.py - Sequential student matricule allocation
from sqlalchemy.orm import Session
from sqlalchemy import select, update, func, cast, case, BigInteger
import logging

from registrar.models.student import Student
from registrar.models.tariff import MatriculeCounter

logger = logging.getLogger(__name__)

COUNTER_NAME = "student"
DEFAULT_MATRICULE_BASE = 240000


def current_max_matricule(db: Session, base: int = DEFAULT_MATRICULE_BASE) -> int:
    """Highest numeric matricule issued so far, or ``base`` when no student exists"""
    highest = db.execute(
        select(func.max(cast(Student.matricule, BigInteger)))
    ).scalar_one_or_none()
    return int(highest) if highest is not None else base


def ensure_counter(db: Session, base: int = DEFAULT_MATRICULE_BASE) -> MatriculeCounter:
    """Create the counter row, or move it up to the highest matricule already on file"""
    highest = current_max_matricule(db, base)
    counter = db.get(MatriculeCounter, COUNTER_NAME)
    if counter is None:
        counter = MatriculeCounter(name=COUNTER_NAME, last_value=highest)
        db.add(counter)
        db.flush()
        logger.info(f"Matricule counter seeded at {counter.last_value}")
    elif counter.last_value < highest:
        logger.warning(f"Matricule counter behind existing students, moving {counter.last_value} -> {highest}")
        counter.last_value = highest
        db.flush()
    return counter


def _highest_on_file():
    return (
        select(func.coalesce(func.max(cast(Student.matricule, BigInteger)), 0))
        .scalar_subquery()
    )


def allocate_matricule(db: Session, base: int = DEFAULT_MATRICULE_BASE) -> str:
    """
    Issue the next matricule inside the caller's transaction.

    The counter is bumped with a single UPDATE, which holds the counter row
    lock (the database write lock on SQLite) until the surrounding transaction
    ends, so concurrent enrollments are serialized on it and never read the
    same value. Rolling the transaction back also rolls the increment back.
    The new value is never lower than the highest matricule on file, so
    students inserted without going through the counter cannot make it
    hand out a number that is already taken.

    Args:
        db: Session whose transaction will also insert the student
        base: Value preceding the first matricule when no student exists

    Returns:
        The new matricule as a numeric string
    """
    highest = _highest_on_file()
    result = db.execute(
        update(MatriculeCounter)
        .where(MatriculeCounter.name == COUNTER_NAME)
        .values(
            last_value=case(
                (highest > MatriculeCounter.last_value, highest),
                else_=MatriculeCounter.last_value,
            ) + 1
        )
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        # First use without bootstrap; a concurrent seeder loses on the primary key
        counter = MatriculeCounter(name=COUNTER_NAME, last_value=current_max_matricule(db, base) + 1)
        db.add(counter)
        db.flush()
        value = counter.last_value
    else:
        value = db.execute(
            select(MatriculeCounter.last_value).where(MatriculeCounter.name == COUNTER_NAME)
        ).scalar_one()

    return str(value)
