import pytest
from app.core.init_system import DEMO_PERIOD, seed_demo_data
from app.models.performance_review import PerformanceReview, ReviewStatus
from app.models.user import User, UserRole
from app.schemas.review import ScoreInput, ScoreItemInput


def test_seed_is_idempotent(db_session):
    assert seed_demo_data(db_session) is True
    db_session.commit()
    assert seed_demo_data(db_session) is False
    assert db_session.query(User).count() == 5


def test_seeded_review_can_be_scored(db_session, service):
    seed_demo_data(db_session)
    db_session.commit()

    lisi = db_session.query(User).filter(User.email == "lisi@example.com").one()
    assert lisi.manager.role == UserRole.TEAM_LEAD
    assert lisi.department_path == "Engineering > Platform"

    review = db_session.query(PerformanceReview).filter(PerformanceReview.period == DEMO_PERIOD).one()
    assert review.status == ReviewStatus.PENDING_SCORE.value
    scores = [ScoreItemInput(id=i.id, score=s) for i, s in zip(review.items, (95, 80, 100, 100))]
    scored = service.score_review(review.id, ScoreInput(items=scores))
    assert scored.total_score == pytest.approx(91.5)


def test_user_table_columns():
    assert set(User.__table__.columns.keys()) == {
        "id", "wechat_userid", "name", "email", "role",
        "department_id", "manager_id", "is_active", "created_at", "updated_at",
    }
