import pytest

from pms.shared.pagination import paginate, page_offset


def test_first_page_of_many():
    meta = paginate(page=1, limit=10, total=25)
    assert meta == {
        "total": 25,
        "last_page": 3,
        "current_page": 1,
        "per_page": 10,
        "prev": None,
        "next": 2,
    }


def test_middle_page():
    meta = paginate(page=2, limit=10, total=25)
    assert meta["prev"] == 1
    assert meta["next"] == 3


def test_last_page_has_no_next():
    meta = paginate(page=3, limit=10, total=25)
    assert meta["next"] is None


def test_empty_result():
    meta = paginate(page=1, limit=10, total=0)
    assert meta["last_page"] == 0
    assert meta["next"] is None
    assert meta["prev"] is None


def test_invalid_arguments():
    with pytest.raises(ValueError):
        paginate(page=0, limit=10, total=5)
    with pytest.raises(ValueError):
        paginate(page=1, limit=0, total=5)


def test_page_offset():
    assert page_offset(1, 10) == 0
    assert page_offset(3, 20) == 40
