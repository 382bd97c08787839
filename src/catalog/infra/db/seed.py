"""Demo catalog content for local development."""
from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import func
from sqlmodel import Session, select

from catalog.models import Course, CourseLevel, DigitalProduct, Event, ProductType


def seed_demo_catalog(session: Session, now: datetime) -> int:
    """Insert the demo rows into an empty catalog; returns rows added."""
    if session.exec(select(func.count()).select_from(Course)).one():
        return 0

    rows = [
        Course(
            title="Mindfulness Meditation Basics",
            slug="mindfulness-meditation-basics",
            description="Learn the fundamentals of mindfulness meditation and build a daily practice.",
            title_es="Fundamentos de la Meditación Mindfulness",
            description_es="Aprende los fundamentos de la meditación mindfulness.",
            price=49.99, duration_hours=8, level=CourseLevel.BEGINNER.value, is_published=True,
        ),
        Course(
            title="Advanced Chakra Healing",
            slug="advanced-chakra-healing",
            description="Deep dive into the seven chakras and techniques for balancing your energy centers.",
            title_es="",
            price=79.99, duration_hours=12, level=CourseLevel.INTERMEDIATE.value, is_published=True,
        ),
        Course(
            title="Spiritual Leadership Mastery",
            slug="spiritual-leadership-mastery",
            description="Integrate spiritual principles and authentic presence in your work and life.",
            price=149.99, duration_hours=20, level=CourseLevel.ADVANCED.value, is_published=True,
        ),
        Course(
            title="Introduction to Yoga Philosophy",
            slug="intro-yoga-philosophy",
            description="Explore yoga beyond the physical practice, including the Yoga Sutras.",
            price=39.99, duration_hours=6, level=CourseLevel.BEGINNER.value, is_published=True,
        ),
        DigitalProduct(
            title="Guided Meditation Collection",
            slug="guided-meditation-collection",
            description="Twelve guided audio sessions for stress relief and deep relaxation.",
            title_es="Colección de Meditaciones Guiadas",
            price=24.99, product_type=ProductType.AUDIO.value, file_size_mb=350.0, is_published=True,
        ),
        DigitalProduct(
            title="The Chakra Handbook",
            slug="chakra-handbook",
            description="A complete ebook on the energy centers of the body.",
            price=14.99, product_type=ProductType.EBOOK.value, file_size_mb=4.5, is_published=True,
        ),
        Event(
            title="Full Moon Meditation Circle",
            slug="full-moon-meditation-circle",
            description="An evening of group meditation under the full moon.",
            title_es="Círculo de Meditación de Luna Llena",
            price=25.0, event_date=now + timedelta(days=14), duration_hours=2,
            venue_name="Harmony Hall", venue_city="Barcelona", venue_country="Spain",
            capacity=40, available_spots=12, is_published=True,
        ),
        Event(
            title="Yoga Retreat Weekend",
            slug="yoga-retreat-weekend",
            description="Two days of yoga, silence and nature.",
            price=320.0, event_date=now + timedelta(days=45), duration_hours=48,
            venue_name="Mountain Lodge", venue_city="Denver", venue_country="USA",
            capacity=20, available_spots=0, is_published=True,
        ),
    ]
    session.add_all(rows)
    session.flush()
    return len(rows)
