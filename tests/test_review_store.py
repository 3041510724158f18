import pytest
from app.core.exceptions import ReviewAlreadyExistsError, StoreError
from app.models.performance_review import ApprovalHistory, PerformanceItem, PerformanceReview, ReviewStatus
from app.services.review_store import ReviewStore


@pytest.fixture
def store(db_session):
    return ReviewStore(db_session)


def _review(user, period="2025-07", status=ReviewStatus.DRAFT, weights=(50, 30)):
    return PerformanceReview(
        user_id=user.id,
        period=period,
        status=status.value,
        items=[PerformanceItem(title=f"Item {i}", weight=w) for i, w in enumerate(weights)],
    )


def test_create_and_read_back(store, employee):
    review = store.create(_review(employee))
    loaded = store.get_by_id(review.id)
    assert loaded.status == "draft"
    assert [i.weight for i in loaded.items] == [50, 30]
    assert loaded.user.name == employee.name


def test_get_by_user_and_period_missing(store, employee):
    assert store.get_by_user_and_period(employee.id, "2030-01") is None


def test_unique_user_period_constraint(store, employee):
    store.create(_review(employee))
    with pytest.raises(ReviewAlreadyExistsError):
        store.create(_review(employee))


def test_update_status(store, employee, db_session):
    review = store.create(_review(employee))
    store.update_status(review.id, ReviewStatus.PENDING_APPROVAL)
    db_session.expire_all()
    assert store.get_by_id(review.id).status == "pending_approval"


def test_status_and_history_written_together(store, employee, db_session):
    review = store.create(_review(employee))
    entry = store.update_status_and_append_approval(review.id, ReviewStatus.PENDING_APPROVAL, employee.id, None)
    assert entry.id is not None
    assert entry.comment == ""
    db_session.expire_all()
    loaded = store.get_by_id(review.id)
    assert loaded.status == "pending_approval"
    assert [a.status for a in loaded.approvals] == ["pending_approval"]


def test_failed_history_insert_rolls_back_status(store, employee, db_session):
    review = store.create(_review(employee))
    # approver_id is NOT NULL, so the insert fails inside the transaction
    with pytest.raises(StoreError):
        store.update_status_and_append_approval(review.id, ReviewStatus.PENDING_APPROVAL, None, "x")
    db_session.expire_all()
    assert store.get_by_id(review.id).status == "draft"
    assert db_session.query(ApprovalHistory).count() == 0


def test_update_items_and_review_skips_none_values(store, employee, db_session):
    review = store.create(_review(employee))
    first, second = review.items
    review.total_score = 47.5
    store.update_items_and_review(review, [
        {"id": first.id, "completion_details": "done", "score": 95},
        {"id": second.id, "completion_details": None, "score": None},
    ])
    db_session.expire_all()
    loaded = store.get_by_id(review.id)
    assert loaded.total_score == pytest.approx(47.5)
    assert (loaded.items[0].completion_details, loaded.items[0].score) == ("done", 95)
    assert (loaded.items[1].completion_details, loaded.items[1].score) == ("", None)


def test_replace_review_swaps_item_set(store, employee, db_session):
    review = store.create(_review(employee, weights=(50, 30, 10)))
    review.final_comment = "second draft"
    store.replace_review(review, [PerformanceItem(title="Only", weight=80)])
    db_session.expire_all()
    loaded = store.get_by_id(review.id)
    assert [i.title for i in loaded.items] == ["Only"]
    assert loaded.final_comment == "second draft"
    assert db_session.query(PerformanceItem).count() == 1


def test_replace_review_period_clash(store, employee):
    first = store.create(_review(employee, period="2025-07"))
    store.create(_review(employee, period="2025-08"))
    first.period = "2025-08"
    with pytest.raises(ReviewAlreadyExistsError):
        store.replace_review(first, [PerformanceItem(title="Only", weight=80)])


def test_list_ordering_and_draft_exclusion(store, employee, orphan_employee, manager):
    store.create(_review(employee, period="2025-05", status=ReviewStatus.PENDING_SCORE))
    store.create(_review(employee, period="2025-07", status=ReviewStatus.COMPLETED))
    store.create(_review(employee, period="2025-06", status=ReviewStatus.DRAFT))
    store.create(_review(orphan_employee, period="2025-07", status=ReviewStatus.PENDING_APPROVAL))

    assert [r.period for r in store.list_by_user(employee.id)] == ["2025-07", "2025-06", "2025-05"]
    assert [r.period for r in store.list_by_manager(manager.id)] == ["2025-07", "2025-05"]
    assert [(r.period, r.user_id) for r in store.list_all_submitted()] == [
        ("2025-07", employee.id), ("2025-07", orphan_employee.id), ("2025-05", employee.id),
    ]
    assert [r.user_id for r in store.list_by_period("2025-07")] == [employee.id, orphan_employee.id]
