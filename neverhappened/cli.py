import click
from flask import current_app
from flask.cli import with_appcontext

from neverhappened.extensions import db
from neverhappened.models import Category

DEFAULT_CATEGORIES = [
    ("Overheard Conversations", "overheard-conversations",
     "Strangers who said exactly the right thing within earshot of a poster."),
    ("Kids Say The Darndest Things", "kids-say",
     "Toddlers delivering TED talks on economics."),
    ("Job Interviews", "job-interviews",
     "Candidates who got hired on the spot for a single bold answer."),
    ("Airplane Stories", "airplane-stories",
     "Entire cabins that stood up and clapped."),
    ("Customer Service", "customer-service",
     "Cashiers humbled, managers summoned, lessons learned."),
    ("Inspirational LinkedIn", "inspirational-linkedin",
     None),
]


def seed_categories(categories=DEFAULT_CATEGORIES) -> int:
    """Insert any missing categories, keyed by slug. Returns how many were added."""
    existing = {slug for (slug,) in db.session.query(Category.slug).all()}
    added = 0
    for name, slug, description in categories:
        if slug in existing:
            continue
        db.session.add(Category(name=name, slug=slug, description=description))
        added += 1
    db.session.commit()
    return added


@click.command("seed-categories")
@with_appcontext
def seed_categories_command():
    """Create the default post categories."""
    added = seed_categories()
    current_app.logger.info("Seeded %d categories", added)
    click.echo(f"Added {added} categories.")
