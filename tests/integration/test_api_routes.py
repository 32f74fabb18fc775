"""
API integration tests using FastAPI TestClient with in-memory DB.
"""
import pytest
from fastapi.testclient import TestClient

AUTHOR = "author@example.com"
LEARNER = "learner@example.com"


@pytest.fixture
def published_course(seed_user, login):
    """
    Free, published course authored over HTTP:
    module 1 (lesson 1 with a quiz, lesson 2) gated by a module test, module 2 (lesson 3).
    """
    seed_user(AUTHOR, ["create_courses"])
    client = login(AUTHOR)

    course = client.post("/api/admin/courses", json={"title": "Python 101", "is_free": True, "is_published": True}).json()
    m1 = client.post(f"/api/admin/courses/{course['id']}/modules", json={"title": "Basics", "is_published": True}).json()
    m2 = client.post(f"/api/admin/courses/{course['id']}/modules", json={"title": "Next", "is_published": True}).json()
    lessons = [
        client.post(f"/api/admin/modules/{module['id']}/lessons", json={"title": title, "content": "body", "is_published": True}).json()
        for module, title in ((m1, "L1"), (m1, "L2"), (m2, "L3"))
    ]
    quiz = client.post(f"/api/admin/lessons/{lessons[0]['id']}/quiz", json={"title": "Check"}).json()
    question = client.post(
        f"/api/admin/quizzes/{quiz['id']}/questions",
        json={"question": "Pick a", "options": ["a", "b"], "correct_answers": ["a"]},
    ).json()
    test = client.post(f"/api/admin/modules/{m1['id']}/test", json={"title": "Module test"}).json()
    test_question = client.post(
        f"/api/admin/quizzes/{test['id']}/questions",
        json={"question": "True?", "question_type": "true_false", "correct_answers": ["true"]},
    ).json()
    return {
        "course": course,
        "modules": [m1, m2],
        "lessons": lessons,
        "quiz": quiz,
        "question": question,
        "test": test,
        "test_question": test_question,
    }


@pytest.fixture
def learner_client(published_course, seed_user, login):
    seed_user(LEARNER)
    return login(LEARNER)


@pytest.mark.integration
class TestHealthRoutes:
    def test_root_returns_healthy(self, api_client: TestClient):
        response = api_client.get("/")
        assert response.status_code == 200
        assert "Healthy" in response.json()["message"]

    def test_request_id_is_echoed(self, api_client: TestClient):
        response = api_client.get("/", headers={"x-request-id": "abc-123"})
        assert response.headers["x-request-id"] == "abc-123"


@pytest.mark.integration
class TestAuthRoutes:
    def test_register_sets_cookie_and_me_works(self, api_client: TestClient):
        response = api_client.post(
            "/auth/register",
            json={"email": "New@Example.com", "password": "securepass123", "confirm_password": "securepass123"},
        )
        assert response.status_code == 200
        me = api_client.get("/auth/me").json()
        assert me["email"] == "new@example.com"
        assert me["permissions"] == []

    def test_register_duplicate_fails(self, api_client: TestClient):
        body = {"email": "dup@example.com", "password": "pass12345", "confirm_password": "pass12345"}
        api_client.post("/auth/register", json=body)
        assert api_client.post("/auth/register", json=body).status_code == 400

    def test_register_password_mismatch(self, api_client: TestClient):
        body = {"email": "x@example.com", "password": "pass12345", "confirm_password": "pass54321"}
        assert api_client.post("/auth/register", json=body).status_code == 400

    def test_register_short_password(self, api_client: TestClient):
        body = {"email": "x@example.com", "password": "short", "confirm_password": "short"}
        assert api_client.post("/auth/register", json=body).status_code == 422

    def test_login_wrong_password_fails(self, api_client: TestClient, seed_user):
        seed_user("login@example.com")
        response = api_client.post("/auth/login", json={"email": "login@example.com", "password": "wrong-password"})
        assert response.status_code == 401

    def test_logout_clears_cookie(self, api_client: TestClient, seed_user, login):
        seed_user("bye@example.com")
        login("bye@example.com")
        assert api_client.post("/auth/logout").status_code == 200
        assert api_client.get("/auth/me").status_code == 401

    def test_protected_route_requires_cookie(self, api_client: TestClient):
        assert api_client.get("/api/user/enrollments").status_code == 401


@pytest.mark.integration
class TestAuthoringRoutes:
    def test_learner_cannot_author(self, api_client: TestClient, seed_user, login):
        seed_user(LEARNER)
        login(LEARNER)
        response = api_client.post("/api/admin/courses", json={"title": "Nope"})
        assert response.status_code == 403
        assert "author_content" in response.json()["detail"]

    def test_order_conflict_is_409(self, published_course, api_client: TestClient):
        course_id = published_course["course"]["id"]
        response = api_client.post(f"/api/admin/courses/{course_id}/modules", json={"title": "Clash", "order_index": 0})
        assert response.status_code == 409

    def test_second_quiz_on_lesson_is_409(self, published_course, api_client: TestClient):
        lesson_id = published_course["lessons"][0]["id"]
        assert api_client.post(f"/api/admin/lessons/{lesson_id}/quiz", json={"title": "Again"}).status_code == 409

    def test_authoring_quiz_includes_answers(self, published_course, api_client: TestClient):
        quiz = api_client.get(f"/api/admin/quizzes/{published_course['quiz']['id']}").json()
        assert quiz["passing_score"] == 80
        assert quiz["questions"][0]["correct_answers"] == ["a"]

    def test_module_test_default_passing_score(self, published_course):
        assert published_course["test"]["passing_score"] == 70

    def test_drafts_listed_for_authors_only(self, published_course, api_client: TestClient):
        api_client.post("/api/admin/courses", json={"title": "Draft"})
        admin_titles = {c["title"] for c in api_client.get("/api/admin/courses").json()["courses"]}
        catalog_titles = {c["title"] for c in api_client.get("/api/courses").json()["courses"]}
        assert "Draft" in admin_titles
        assert "Draft" not in catalog_titles

    def test_patch_and_delete_lesson(self, published_course, api_client: TestClient):
        lesson_id = published_course["lessons"][1]["id"]
        response = api_client.patch(f"/api/admin/lessons/{lesson_id}", json={"title": "Renamed"})
        assert response.status_code == 200 and response.json()["title"] == "Renamed"
        assert api_client.delete(f"/api/admin/lessons/{lesson_id}").status_code == 204
        assert api_client.patch(f"/api/admin/lessons/{lesson_id}", json={"title": "Gone"}).status_code == 404

    def test_invalid_passing_score_is_422(self, published_course, api_client: TestClient):
        quiz_id = published_course["quiz"]["id"]
        assert api_client.patch(f"/api/admin/quizzes/{quiz_id}", json={"passing_score": 120}).status_code == 422


@pytest.mark.integration
class TestLearningFlow:
    def test_viewer_shows_locks(self, published_course, learner_client: TestClient):
        course_id = published_course["course"]["id"]
        viewer = learner_client.get(f"/api/courses/{course_id}/viewer").json()
        m1, m2 = viewer["modules"]
        assert m1["accessible"] is True
        assert [lesson["accessible"] for lesson in m1["lessons"]] == [True, False]
        assert m1["test_id"] == published_course["test"]["id"]
        assert m2["accessible"] is False
        assert viewer["progress"] == 0

    def test_locked_lesson_is_403(self, published_course, learner_client: TestClient):
        first, second, _ = published_course["lessons"]
        assert learner_client.get(f"/api/lessons/{first['id']}").status_code == 200
        assert learner_client.get(f"/api/lessons/{second['id']}").status_code == 403
        assert learner_client.get(f"/api/lessons/{second['id']}/access").json() == {
            "unit_id": second["id"],
            "accessible": False,
        }

    def test_learner_quiz_hides_answers(self, published_course, learner_client: TestClient):
        quiz = learner_client.get(f"/api/quizzes/{published_course['quiz']['id']}").json()
        assert "correct_answers" not in quiz["questions"][0]

    def test_passing_the_quiz_unlocks_next_lesson(self, published_course, learner_client: TestClient):
        quiz_id = published_course["quiz"]["id"]
        question_id = published_course["question"]["id"]
        second = published_course["lessons"][1]

        failed = learner_client.post(f"/api/quizzes/{quiz_id}/attempts", json={"answers": {question_id: "b"}}).json()
        assert (failed["score"], failed["passed"], failed["attempt_number"]) == (0, False, 1)
        assert learner_client.get(f"/api/lessons/{second['id']}").status_code == 403

        passed = learner_client.post(f"/api/quizzes/{quiz_id}/attempts", json={"answers": {question_id: "A"}}).json()
        assert (passed["score"], passed["passed"], passed["attempt_number"]) == (100, True, 2)
        assert learner_client.get(f"/api/lessons/{second['id']}").status_code == 200

        latest = learner_client.get(f"/api/quizzes/{quiz_id}/attempts/latest").json()
        assert latest["id"] == passed["id"]
        history = learner_client.get(f"/api/quizzes/{quiz_id}/attempts").json()["attempts"]
        assert [a["attempt_number"] for a in history] == [2, 1]

    def test_latest_attempt_empty(self, published_course, learner_client: TestClient):
        response = learner_client.get(f"/api/quizzes/{published_course['quiz']['id']}/attempts/latest")
        assert response.status_code == 200
        assert response.json() is None

    def test_module_test_unlocks_next_module(self, published_course, learner_client: TestClient):
        test_id = published_course["test"]["id"]
        m2 = published_course["modules"][1]
        assert learner_client.get(f"/api/modules/{m2['id']}/access").json()["accessible"] is False
        answers = {published_course["test_question"]["id"]: True}
        assert learner_client.post(f"/api/quizzes/{test_id}/attempts", json={"answers": answers}).json()["passed"] is True
        assert learner_client.get(f"/api/modules/{m2['id']}/access").json()["accessible"] is True

    def test_unknown_question_in_answers_is_400(self, published_course, learner_client: TestClient):
        quiz_id = published_course["quiz"]["id"]
        response = learner_client.post(f"/api/quizzes/{quiz_id}/attempts", json={"answers": {"bogus": "a"}})
        assert response.status_code == 400

    def test_record_progress_refreshes_enrollment(self, published_course, learner_client: TestClient):
        course_id = published_course["course"]["id"]
        first = published_course["lessons"][0]
        assert learner_client.post(f"/api/courses/{course_id}/enroll").status_code == 200

        body = learner_client.post(f"/api/lessons/{first['id']}/progress", json={"is_completed": True}).json()
        assert body["lesson"]["is_completed"] is True
        assert body["lesson"]["completed_at"] is not None
        assert (body["course"]["progress"], body["course"]["total_lessons"]) == (33, 3)

        enrollment = learner_client.get(f"/api/user/enrollments/{course_id}").json()
        assert (enrollment["progress"], enrollment["completed"]) == (33, False)
        assert learner_client.get(f"/api/courses/{course_id}/progress").json()["progress"] == 33

    def test_progress_flag_must_be_boolean(self, published_course, learner_client: TestClient):
        first = published_course["lessons"][0]
        response = learner_client.post(f"/api/lessons/{first['id']}/progress", json={"is_completed": "yes"})
        assert response.status_code == 422

    def test_progress_on_locked_lesson_is_403(self, published_course, learner_client: TestClient):
        second = published_course["lessons"][1]
        response = learner_client.post(f"/api/lessons/{second['id']}/progress", json={"is_completed": True})
        assert response.status_code == 403

    def test_double_enroll_is_409(self, published_course, learner_client: TestClient):
        course_id = published_course["course"]["id"]
        learner_client.post(f"/api/courses/{course_id}/enroll")
        assert learner_client.post(f"/api/courses/{course_id}/enroll").status_code == 409

    def test_not_enrolled_enrollment_is_404(self, published_course, learner_client: TestClient):
        course_id = published_course["course"]["id"]
        response = learner_client.get(f"/api/user/enrollments/{course_id}")
        assert response.status_code == 404
        assert response.json()["detail"] == "Enrollment not found"

    def test_unknown_course_is_404(self, learner_client: TestClient):
        response = learner_client.get("/api/courses/missing")
        assert response.status_code == 404
        assert response.json()["detail"] == "Course not found"

    def test_enrollment_list_reflects_new_lessons(self, published_course, login, learner_client: TestClient):
        course_id = published_course["course"]["id"]
        first = published_course["lessons"][0]
        learner_client.post(f"/api/courses/{course_id}/enroll")
        learner_client.post(f"/api/lessons/{first['id']}/progress", json={"is_completed": True})
        assert learner_client.get("/api/user/enrollments").json()["enrollments"][0]["progress"] == 33

        author = login(AUTHOR)
        m2 = published_course["modules"][1]
        response = author.post(f"/api/admin/modules/{m2['id']}/lessons", json={"title": "L4", "is_published": True})
        assert response.status_code == 201

        client = login(LEARNER)
        listed = client.get("/api/user/enrollments").json()["enrollments"]
        assert [(e["course_id"], e["progress"]) for e in listed] == [(course_id, 25)]
        assert client.get(f"/api/user/enrollments/{course_id}").json()["progress"] == 25

    def test_unknown_units(self, learner_client: TestClient):
        assert learner_client.get("/api/lessons/missing").status_code == 404
        assert learner_client.get("/api/quizzes/missing").status_code == 404
        assert learner_client.get("/api/courses/missing/viewer").status_code == 404
        assert learner_client.get("/api/lessons/missing/access").json()["accessible"] is False

    def test_learner_cannot_preview(self, published_course, learner_client: TestClient):
        course_id = published_course["course"]["id"]
        assert learner_client.get(f"/api/courses/{course_id}/viewer", params={"preview": True}).status_code == 403


@pytest.mark.integration
class TestPaidCourses:
    @pytest.fixture
    def paid_course(self, seed_user, login):
        seed_user(AUTHOR, ["create_courses"])
        client = login(AUTHOR)
        course = client.post("/api/admin/courses", json={"title": "Pro", "is_free": False, "is_published": True}).json()
        module = client.post(f"/api/admin/courses/{course['id']}/modules", json={"title": "M", "is_published": True}).json()
        lesson = client.post(f"/api/admin/modules/{module['id']}/lessons", json={"title": "L", "is_published": True}).json()
        return course, lesson

    @pytest.fixture
    def paid_quiz(self, paid_course, login):
        _, lesson = paid_course
        client = login(AUTHOR)
        quiz = client.post(f"/api/admin/lessons/{lesson['id']}/quiz", json={"title": "Check"}).json()
        question = client.post(
            f"/api/admin/quizzes/{quiz['id']}/questions",
            json={"question": "Pick a", "options": ["a", "b"], "correct_answers": ["a"]},
        ).json()
        return quiz, question

    def test_learner_needs_enrollment(self, paid_course, seed_user, login):
        course, lesson = paid_course
        seed_user(LEARNER)
        client = login(LEARNER)
        assert client.get(f"/api/courses/{course['id']}/access").json()["has_access"] is False
        assert client.get(f"/api/lessons/{lesson['id']}").status_code == 403
        assert client.post(f"/api/courses/{course['id']}/enroll").status_code == 403

    def test_quiz_requires_enrollment(self, paid_quiz, seed_user, login):
        quiz, question = paid_quiz
        seed_user(LEARNER)
        client = login(LEARNER)
        assert client.get(f"/api/quizzes/{quiz['id']}").status_code == 403
        response = client.post(f"/api/quizzes/{quiz['id']}/attempts", json={"answers": {question["id"]: "a"}})
        assert response.status_code == 403
        assert client.get(f"/api/quizzes/{quiz['id']}/attempts").json()["attempts"] == []

    def test_granted_learner_takes_quiz(self, paid_course, paid_quiz, seed_user, login):
        course, _ = paid_course
        quiz, question = paid_quiz
        learner_id = seed_user(LEARNER)
        seed_user("ops@example.com", ["manage_accounts"])
        client = login("ops@example.com")
        client.post(f"/api/admin/users/{learner_id}/grant-course", json={"course_id": course["id"]})
        client = login(LEARNER)
        assert client.get(f"/api/quizzes/{quiz['id']}").status_code == 200
        response = client.post(f"/api/quizzes/{quiz['id']}/attempts", json={"answers": {question["id"]: "a"}})
        assert response.status_code == 200
        assert response.json()["passed"] is True

    def test_premium_learner_enrolls(self, paid_course, seed_user, login):
        course, lesson = paid_course
        seed_user("vip@example.com", ["premium"])
        client = login("vip@example.com")
        assert client.post(f"/api/courses/{course['id']}/enroll").status_code == 200
        assert client.get(f"/api/lessons/{lesson['id']}").status_code == 200

    def test_admin_grant(self, paid_course, seed_user, login):
        course, lesson = paid_course
        learner_id = seed_user(LEARNER)
        seed_user("ops@example.com", ["manage_accounts"])
        client = login("ops@example.com")
        response = client.post(f"/api/admin/users/{learner_id}/grant-course", json={"course_id": course["id"]})
        assert response.status_code == 200
        client = login(LEARNER)
        assert client.get(f"/api/lessons/{lesson['id']}").status_code == 200


@pytest.mark.integration
class TestAccountRoutes:
    def test_update_permissions(self, api_client: TestClient, seed_user, login):
        target = seed_user(LEARNER)
        seed_user("ops@example.com", ["manage_accounts"])
        login("ops@example.com")
        response = api_client.put(f"/api/admin/users/{target}/permissions", json={"permissions": ["premium", "admin"]})
        assert response.status_code == 200
        assert response.json()["permissions"] == ["admin", "premium"]

    def test_unknown_capability_is_400(self, api_client: TestClient, seed_user, login):
        target = seed_user(LEARNER)
        seed_user("ops@example.com", ["manage_accounts"])
        login("ops@example.com")
        response = api_client.put(f"/api/admin/users/{target}/permissions", json={"permissions": ["wizard"]})
        assert response.status_code == 400

    def test_learner_cannot_list_users(self, api_client: TestClient, seed_user, login):
        seed_user(LEARNER)
        login(LEARNER)
        assert api_client.get("/api/admin/users").status_code == 403
