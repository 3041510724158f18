import logging
from sqlalchemy.orm import Session
from app.database import SessionLocal
from app.models.department import Department
from app.models.performance_review import ItemCategory, PerformanceItem, PerformanceReview, ReviewStatus
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

DEMO_PERIOD = "2025-07"


def _get_or_create_user(db: Session, email: str, **fields) -> User:
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        user = User(email=email, **fields)
        db.add(user)
        db.flush()
    return user


def seed_demo_data(db: Session) -> bool:
    """
    Populate a development database with a small team and one review.
    Returns False when the data is already present.
    """
    if db.query(User).filter(User.email == "manager@example.com").first():
        logger.info("Demo data already present. Skipping.")
        return False

    engineering = Department(name="Engineering")
    platform = Department(name="Platform", parent=engineering)
    db.add_all([engineering, platform])
    db.flush()

    manager = _get_or_create_user(
        db, "manager@example.com", name="Wang Manager", wechat_userid="wechat_manager",
        role=UserRole.TEAM_LEAD, department_id=platform.id,
    )
    lisi = _get_or_create_user(
        db, "lisi@example.com", name="Li Si", wechat_userid="wechat_lisi",
        role=UserRole.EMPLOYEE, department_id=platform.id, manager_id=manager.id,
    )
    _get_or_create_user(
        db, "zhaowu@example.com", name="Zhao Wu", wechat_userid="wechat_zhaowu",
        role=UserRole.EMPLOYEE, department_id=platform.id, manager_id=manager.id,
    )
    _get_or_create_user(db, "hr@example.com", name="HR Partner", wechat_userid="wechat_hr", role=UserRole.HR)
    _get_or_create_user(db, "admin@example.com", name="Administrator", wechat_userid="wechat_admin", role=UserRole.ADMIN)

    db.add(PerformanceReview(
        user_id=lisi.id,
        period=DEMO_PERIOD,
        status=ReviewStatus.PENDING_SCORE.value,
        items=[
            PerformanceItem(category=ItemCategory.WORK_PERFORMANCE.value, title="Ship the v2.0 module",
                            description="Deliver the v2.0 module on schedule", weight=50, target="v2.0 released on time"),
            PerformanceItem(category=ItemCategory.WORK_PERFORMANCE.value, title="Fix production bugs",
                            description="Reduce the open production bug count", weight=30, target="Bug count down 50%"),
            PerformanceItem(category=ItemCategory.AI_USAGE.value, title="Large-model usage",
                            description="Use AI tooling in daily work", weight=10, target="AI tools used effectively"),
            PerformanceItem(category=ItemCategory.VALUES.value, title="Living the values",
                            description="Contribute to team knowledge sharing", weight=10, target="Regular team sharing"),
        ],
    ))
    return True


def init_system_data():
    """
    Seeds demo users and a review when SEED_DEMO_DATA is enabled.
    """
    db = SessionLocal()
    try:
        if seed_demo_data(db):
            db.commit()
            logger.info("✓ Demo data seeded")
    except Exception as e:
        db.rollback()
        logger.error(f"Error while seeding demo data: {str(e)}", exc_info=True)
        raise
    finally:
        db.close()
