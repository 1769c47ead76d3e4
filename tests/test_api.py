from quiz_manager.services.attempt_service import attempt_service

from conftest import question


def register(client, username, role, password="secret", full_name=None):
    return client.post("/api/auth/register", json={
        "username": username,
        "password": password,
        "full_name": full_name or username.title(),
        "role": role,
    })


def login(client, username, password="secret"):
    response = client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


def setup_users(client):
    register(client, "teacher1", "LECTURER")
    register(client, "alice", "STUDENT")
    return login(client, "teacher1"), login(client, "alice")


def create_quiz(client, headers, letters=("A", "B", "C"), name="Python basics"):
    response = client.post("/api/quizzes", headers=headers, json={
        "name": name,
        "time_limit": 5,
        "questions": [question(letter) for letter in letters],
    })
    assert response.status_code == 201
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_register_and_login(client):
    response = register(client, "alice", "STUDENT")
    assert response.status_code == 201
    assert response.json()["role"] == "STUDENT"

    headers = login(client, "alice")
    me = client.get("/api/auth/me", headers=headers)

    assert me.status_code == 200
    assert me.json()["username"] == "alice"


def test_duplicate_username_conflict(client):
    register(client, "alice", "LECTURER")

    response = register(client, "alice", "STUDENT")

    assert response.status_code == 409
    assert response.json()["error"] == "duplicate_identity"


def test_bad_login(client):
    register(client, "alice", "STUDENT")

    response = client.post("/api/auth/login", json={"username": "alice", "password": "wrong"})

    assert response.status_code == 401
    assert response.json() == {"error": "authentication_failed", "message": "Incorrect password"}


def test_password_over_bcrypt_limit_rejected(client):
    response = register(client, "alice", "STUDENT", password="x" * 73)
    assert response.status_code == 422


def test_logout_invalidates_token(client):
    register(client, "alice", "STUDENT")
    headers = login(client, "alice")

    assert client.post("/api/auth/logout", headers=headers).status_code == 204
    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_missing_token(client):
    response = client.get("/api/quizzes")
    assert response.status_code == 401


def test_student_cannot_manage_quizzes(client):
    _, student = setup_users(client)

    response = client.post("/api/quizzes", headers=student, json={
        "name": "Nope", "time_limit": 5, "questions": [question("A")],
    })

    assert response.status_code == 403
    assert response.json()["error"] == "permission_denied"


def test_quiz_without_questions_rejected(client):
    teacher, _ = setup_users(client)

    response = client.post("/api/quizzes", headers=teacher, json={
        "name": "Empty", "time_limit": 5, "questions": [],
    })

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_argument"


def test_teacher_quiz_management(client):
    teacher, _ = setup_users(client)
    quiz = create_quiz(client, teacher)

    assert quiz["number_of_questions"] == 3
    questions = client.get(f"/api/quizzes/{quiz['id']}/questions", headers=teacher).json()
    assert [q["correct_answer"] for q in questions] == ["A", "B", "C"]

    found = client.get("/api/quizzes", headers=teacher, params={"name": "PYTHON"}).json()
    assert [q["id"] for q in found] == [quiz["id"]]

    assigned = client.post(f"/api/quizzes/{quiz['id']}/students", headers=teacher, json={"username": "alice"})
    assert assigned.status_code == 201
    again = client.post(f"/api/quizzes/{quiz['id']}/students", headers=teacher, json={"username": "alice"})
    assert again.status_code == 409
    assert again.json()["error"] == "already_assigned"

    students = client.get(f"/api/quizzes/{quiz['id']}/students", headers=teacher).json()
    assert [s["username"] for s in students] == ["alice"]

    assert client.delete(f"/api/quizzes/{quiz['id']}", headers=teacher).status_code == 204
    assert client.get(f"/api/quizzes/{quiz['id']}", headers=teacher).status_code == 404


def test_take_quiz_end_to_end(client):
    teacher, student = setup_users(client)
    quiz = create_quiz(client, teacher)
    client.post(f"/api/quizzes/{quiz['id']}/students", headers=teacher, json={"username": "alice"})

    dashboard = client.get("/api/students/me/quizzes", headers=student).json()
    assert [(q["id"], q["completed"]) for q in dashboard] == [(quiz["id"], False)]

    started = client.post("/api/attempts", headers=student, json={"quiz_id": quiz["id"]})
    assert started.status_code == 201
    attempt = started.json()
    assert attempt["state"] == "IN_PROGRESS"
    assert attempt["time_remaining"] == 300
    assert "correct_answer" not in attempt["question"]

    attempt_id = attempt["attempt_id"]
    for letter in ("A", "D", "C"):
        client.put(f"/api/attempts/{attempt_id}/answer", headers=student, json={"answer": letter})
        client.post(f"/api/attempts/{attempt_id}/next", headers=student)

    summary = client.post(f"/api/attempts/{attempt_id}/submit", headers=student)
    assert summary.status_code == 200
    body = summary.json()
    assert body["score"] == 20
    assert body["total_points"] == 30
    assert body["saved"] is True

    dashboard = client.get("/api/students/me/quizzes", headers=student).json()
    assert dashboard[0]["completed"] is True

    rejoin = client.post("/api/attempts", headers=student, json={"quiz_id": quiz["id"]})
    assert rejoin.status_code == 409
    assert rejoin.json()["error"] == "already_completed"

    results = client.get(f"/api/results/quiz/{quiz['id']}", headers=teacher).json()
    assert results[0]["student_username"] == "alice"
    assert results[0]["score"] == 20

    stats = client.get(f"/api/results/quiz/{quiz['id']}/statistics", headers=teacher).json()
    assert stats["total_students"] == 1
    assert stats["average_score"] == 20.0

    export = client.get(f"/api/results/quiz/{quiz['id']}/export", headers=teacher)
    assert export.status_code == 200
    assert export.headers["content-type"].startswith("text/csv")
    assert export.text == "Quiz Name,Username,Score\nPython basics,alice,20\n"


def test_unassigned_quiz_cannot_be_started(client):
    teacher, student = setup_users(client)
    quiz = create_quiz(client, teacher)

    response = client.post("/api/attempts", headers=student, json={"quiz_id": quiz["id"]})

    assert response.status_code == 403
    assert len(attempt_service._attempts) == 0


def test_early_submit_rejected(client):
    teacher, student = setup_users(client)
    quiz = create_quiz(client, teacher)
    client.post(f"/api/quizzes/{quiz['id']}/students", headers=teacher, json={"username": "alice"})
    attempt_id = client.post("/api/attempts", headers=student, json={"quiz_id": quiz["id"]}).json()["attempt_id"]
    client.put(f"/api/attempts/{attempt_id}/answer", headers=student, json={"answer": "A"})

    response = client.post(f"/api/attempts/{attempt_id}/submit", headers=student)

    assert response.status_code == 400
    assert client.get(f"/api/attempts/{attempt_id}", headers=student).json()["state"] == "IN_PROGRESS"


def test_regrade_and_delete_result(client):
    teacher, student = setup_users(client)
    quiz = create_quiz(client, teacher, letters=("A",))
    client.post(f"/api/quizzes/{quiz['id']}/students", headers=teacher, json={"username": "alice"})
    attempt_id = client.post("/api/attempts", headers=student, json={"quiz_id": quiz["id"]}).json()["attempt_id"]
    client.put(f"/api/attempts/{attempt_id}/answer", headers=student, json={"answer": "B"})
    client.post(f"/api/attempts/{attempt_id}/submit", headers=student)

    result_id = client.get("/api/students/me/results", headers=student).json()[0]["id"]

    regraded = client.put(f"/api/results/{result_id}/score", headers=teacher, json={"score": 10})
    assert regraded.status_code == 200
    assert regraded.json()["score"] == 10

    assert client.delete(f"/api/results/{result_id}", headers=teacher).status_code == 204
    assert client.delete(f"/api/results/{result_id}", headers=teacher).status_code == 404


def test_import_students_upload(client):
    teacher, _ = setup_users(client)
    content = "username,full_name,student_code\nann,Ann Lee,S1\nbad,row\n".encode("utf-8-sig")

    response = client.post(
        "/api/students/import",
        headers=teacher,
        files={"file": ("students.csv", content, "text/csv")},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success_count"] == 1
    assert body["error_count"] == 1
    assert login(client, "ann", "123456")


def test_class_endpoints(client):
    teacher, student = setup_users(client)

    created = client.post("/api/classes", headers=teacher, json={"name": "CS101"})
    assert created.status_code == 201
    class_id = created.json()["id"]

    response = client.post(
        f"/api/classes/{class_id}/import",
        headers=teacher,
        files={"file": ("roster.csv", b"alice,Alice,S1\nann,Ann Lee,S2\n", "text/csv")},
    )
    assert response.json()["success_count"] == 2

    roster = client.get(f"/api/classes/{class_id}/students", headers=teacher).json()
    assert [s["username"] for s in roster] == ["alice", "ann"]

    assert client.get("/api/classes", headers=student).status_code == 403
