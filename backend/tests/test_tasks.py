"""Test task endpoints"""

from datetime import datetime, timedelta, timezone
import pytest
from fastapi import status
from focusflow.db.models import Subtask, Task
from focusflow.db.repositories import tasks as tasks_repository

pytestmark = pytest.mark.tasks


def test_create_task(authorized_client, test_user):
    # Test creating a task
    task_data = {
        "title": "Test Task",
        "description": "This is a test task",
        "priority": 1,
    }

    response = authorized_client.post("/api/v1/tasks/", json=task_data)
    assert response.status_code == status.HTTP_201_CREATED

    data = response.json()
    assert data["title"] == task_data["title"]
    assert data["description"] == task_data["description"]
    assert data["priority"] == task_data["priority"]
    assert data["completed"] is False
    assert data["user_id"] == test_user.id
    assert data["subtasks"] == []
    assert data["progress"] == 0


def test_create_task_with_subtasks(authorized_client):
    task_data = {
        "title": "Plan trip",
        "subtasks": [{"title": "Book train"}, {"title": "Pack bag"}],
    }

    response = authorized_client.post("/api/v1/tasks/", json=task_data)
    assert response.status_code == status.HTTP_201_CREATED

    data = response.json()
    assert [subtask["title"] for subtask in data["subtasks"]] == [
        "Book train",
        "Pack bag",
    ]
    assert [subtask["order"] for subtask in data["subtasks"]] == [0, 1]
    assert data["priority"] == 2


@pytest.mark.parametrize(
    "task_data",
    [{"title": ""}, {"title": "Bad priority", "priority": 4}, {"description": "x"}],
)
def test_create_task_validation(authorized_client, task_data):
    response = authorized_client.post("/api/v1/tasks/", json=task_data)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_get_tasks(authorized_client, db, test_user):
    # Create some tasks
    tasks = [
        Task(user_id=test_user.id, title="Task 1"),
        Task(user_id=test_user.id, title="Task 2", completed=True),
        Task(user_id=test_user.id, title="Task 3"),
    ]
    db.add_all(tasks)
    db.commit()

    # Get all tasks
    response = authorized_client.get("/api/v1/tasks/")
    assert response.status_code == status.HTTP_200_OK
    assert len(response.json()) == 3

    # Filter by completion
    response = authorized_client.get("/api/v1/tasks/?completed=true")
    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert len(data) == 1
    assert data[0]["title"] == "Task 2"


def test_tasks_are_private(authorized_client, db, other_user):
    task = Task(user_id=other_user.id, title="Not yours")
    db.add(task)
    db.commit()
    db.refresh(task)

    assert authorized_client.get("/api/v1/tasks/").json() == []
    response = authorized_client.get(f"/api/v1/tasks/{task.id}")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_search_tasks(authorized_client, db, test_user):
    groceries = Task(user_id=test_user.id, title="Groceries")
    groceries.subtasks.append(Subtask(title="Buy oat milk"))
    db.add_all(
        [
            groceries,
            Task(user_id=test_user.id, title="Taxes", description="File before May"),
            Task(user_id=test_user.id, title="Laundry"),
        ]
    )
    db.commit()

    response = authorized_client.get("/api/v1/tasks/?q=MILK")
    assert [task["title"] for task in response.json()] == ["Groceries"]

    response = authorized_client.get("/api/v1/tasks/?q=may")
    assert [task["title"] for task in response.json()] == ["Taxes"]


def test_sort_tasks(authorized_client, db, test_user):
    now = datetime.now(timezone.utc)
    db.add_all(
        [
            Task(user_id=test_user.id, title="Bravo", priority=3),
            Task(
                user_id=test_user.id,
                title="alpha",
                priority=1,
                due_date=now + timedelta(days=2),
            ),
            Task(
                user_id=test_user.id,
                title="Charlie",
                priority=2,
                due_date=now + timedelta(days=1),
            ),
        ]
    )
    db.commit()

    response = authorized_client.get("/api/v1/tasks/?sort_by=priority&order=asc")
    assert [task["title"] for task in response.json()] == ["alpha", "Charlie", "Bravo"]

    response = authorized_client.get("/api/v1/tasks/?sort_by=title&order=asc")
    assert [task["title"] for task in response.json()] == ["alpha", "Bravo", "Charlie"]

    response = authorized_client.get("/api/v1/tasks/?sort_by=due_date&order=asc")
    assert [task["title"] for task in response.json()] == ["Charlie", "alpha", "Bravo"]


def test_sort_and_page_tasks(authorized_client, db, test_user):
    now = datetime.now(timezone.utc)
    db.add_all(
        [
            Task(user_id=test_user.id, title="Delta", priority=2),
            Task(
                user_id=test_user.id,
                title="echo",
                priority=1,
                due_date=now + timedelta(days=3),
            ),
            Task(
                user_id=test_user.id,
                title="Foxtrot",
                priority=3,
                due_date=now + timedelta(days=1),
            ),
        ]
    )
    db.commit()

    response = authorized_client.get(
        "/api/v1/tasks/?sort_by=priority&order=asc&skip=1&limit=1"
    )
    assert [task["title"] for task in response.json()] == ["Delta"]

    response = authorized_client.get("/api/v1/tasks/?sort_by=due_date&order=desc")
    assert [task["title"] for task in response.json()] == ["Delta", "echo", "Foxtrot"]

    response = authorized_client.get(
        "/api/v1/tasks/?sort_by=title&order=desc&skip=2&limit=5"
    )
    assert [task["title"] for task in response.json()] == ["Delta"]


def test_repository_sorts_in_query(db, test_user):
    db.add_all(
        [
            Task(user_id=test_user.id, title="beta", priority=2),
            Task(user_id=test_user.id, title="Alpha", priority=2),
            Task(user_id=test_user.id, title="Gamma", priority=1),
        ]
    )
    db.commit()

    tasks = tasks_repository.get_tasks(
        db, user_id=test_user.id, sort_by="title", order="asc", skip=1, limit=1
    )
    assert [task.title for task in tasks] == ["beta"]

    with pytest.raises(ValueError):
        tasks_repository.get_tasks(db, user_id=test_user.id, sort_by="colour")


def test_sort_tasks_unknown_field(authorized_client):
    response = authorized_client.get("/api/v1/tasks/?sort_by=colour")
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_get_task(authorized_client, db, test_user):
    # Create a task
    task = Task(
        user_id=test_user.id,
        title="Test Task",
        description="This is a test task",
    )
    db.add(task)
    db.commit()
    db.refresh(task)

    # Get the task
    response = authorized_client.get(f"/api/v1/tasks/{task.id}")
    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert data["id"] == task.id
    assert data["title"] == task.title
    assert data["description"] == task.description


def test_get_missing_task(authorized_client):
    response = authorized_client.get("/api/v1/tasks/999")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_update_task(authorized_client, db, test_user):
    # Create a task
    task = Task(user_id=test_user.id, title="Original Title")
    db.add(task)
    db.commit()
    db.refresh(task)

    # Update the task
    update_data = {"title": "Updated Title", "priority": 1}

    response = authorized_client.put(f"/api/v1/tasks/{task.id}", json=update_data)
    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert data["title"] == update_data["title"]
    assert data["priority"] == update_data["priority"]

    # Verify in database
    db.refresh(task)
    assert task.title == update_data["title"]
    assert task.priority == update_data["priority"]


def test_patch_task_keeps_other_fields(authorized_client, db, test_user):
    task = Task(user_id=test_user.id, title="Keep me", description="Details")
    db.add(task)
    db.commit()
    db.refresh(task)

    response = authorized_client.patch(
        f"/api/v1/tasks/{task.id}", json={"description": None}
    )
    assert response.status_code == status.HTTP_200_OK

    data = response.json()
    assert data["title"] == "Keep me"
    assert data["description"] is None


def test_task_completed_at_follows_completed_flag(authorized_client):
    """completed_at is set on completion and cleared when reopened"""
    response = authorized_client.post("/api/v1/tasks/", json={"title": "Complete me"})
    task_id = response.json()["id"]
    assert response.json()["completed_at"] is None

    response = authorized_client.patch(
        f"/api/v1/tasks/{task_id}", json={"completed": True}
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["completed"] is True
    assert response.json()["completed_at"] is not None
    assert response.json()["progress"] == 100

    response = authorized_client.patch(
        f"/api/v1/tasks/{task_id}", json={"completed": False}
    )
    assert response.json()["completed_at"] is None


def test_delete_task(authorized_client, db, test_user):
    # Create a task
    task = Task(user_id=test_user.id, title="Task to Delete")
    db.add(task)
    db.commit()
    db.refresh(task)

    # Soft delete the task
    response = authorized_client.delete(f"/api/v1/tasks/{task.id}")
    assert response.status_code == status.HTTP_204_NO_CONTENT

    # Verify task is soft deleted
    db.refresh(task)
    assert task.deleted_at is not None

    # Task should not appear in list
    response = authorized_client.get("/api/v1/tasks/")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == []


def test_permanent_delete(authorized_client, db, test_user):
    task = Task(user_id=test_user.id, title="Gone for good")
    db.add(task)
    db.commit()
    task_id = task.id

    response = authorized_client.delete(f"/api/v1/tasks/{task_id}?permanent=true")
    assert response.status_code == status.HTTP_204_NO_CONTENT

    db.expire_all()
    assert db.query(Task).filter(Task.id == task_id).first() is None


def test_delete_missing_task(authorized_client):
    response = authorized_client.delete("/api/v1/tasks/999")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_restore_task(authorized_client):
    """Test restoring a soft-deleted task"""
    response = authorized_client.post("/api/v1/tasks/", json={"title": "Come back"})
    task_id = response.json()["id"]

    authorized_client.delete(f"/api/v1/tasks/{task_id}")
    response = authorized_client.post(f"/api/v1/tasks/{task_id}/restore")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["id"] == task_id

    response = authorized_client.get(f"/api/v1/tasks/{task_id}")
    assert response.status_code == status.HTTP_200_OK


def test_restore_live_task(authorized_client):
    response = authorized_client.post("/api/v1/tasks/", json={"title": "Still here"})
    task_id = response.json()["id"]

    response = authorized_client.post(f"/api/v1/tasks/{task_id}/restore")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
