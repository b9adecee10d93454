from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from dbsanitycheck.db_models import SanityCheck, SanityCheckCategory
from dbsanitycheck.schemas import Check, Exclusion


class CatalogLoadError(RuntimeError):
    pass


def _to_check(model: SanityCheck) -> Check:
    return Check(
        id=model.id,
        category=model.category.name,
        topic=model.topic,
        query=model.query,
        exclusions=tuple(Exclusion(id=item.id, raw=item.exclusion) for item in model.exclusions),
        comments=model.comments,
    )


def find_all_checks(db: Session) -> list[Check]:
    # Category then topic keeps category sections contiguous; id breaks ties deterministically.
    stmt = (
        select(SanityCheck)
        .join(SanityCheck.category)
        .options(selectinload(SanityCheck.category), selectinload(SanityCheck.exclusions))
        .order_by(SanityCheckCategory.name, SanityCheck.topic, SanityCheck.id)
    )
    try:
        models = db.execute(stmt).scalars().all()
        return [_to_check(model) for model in models]
    except SQLAlchemyError as exc:
        raise CatalogLoadError(f"could not load sanity check catalog: {exc}") from exc
