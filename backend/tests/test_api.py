"""
Tests for the HTTP API, run against a temporary local store.
"""
import pytest


def payload(day, subjects, test_date=True):
    """camelCase request body; subjects are (name, correct, incorrect, skipped)."""
    subject_docs = [
        {
            "subjectName": name,
            "totalQuestions": c + i + s,
            "correctQuestions": c,
            "incorrectQuestions": i,
            "skippedQuestions": s,
        }
        for name, c, i, s in subjects
    ]
    body = {
        "totalQuestions": sum(d["totalQuestions"] for d in subject_docs),
        "correctQuestions": sum(d["correctQuestions"] for d in subject_docs),
        "incorrectQuestions": sum(d["incorrectQuestions"] for d in subject_docs),
        "skippedQuestions": sum(d["skippedQuestions"] for d in subject_docs),
        "subjects": subject_docs,
    }
    if test_date:
        body["testDate"] = f"2024-01-{day:02d}T09:00:00Z"
    return body


FULL_TEST = [
    ("Physics", 40, 5, 5),
    ("Chemistry", 50, 15, 5),
    ("Biology", 60, 10, 10),
]


@pytest.fixture
def created(client):
    """Two stored tests: 400 marks on Jan 1, 600 marks on Jan 2."""
    first = client.post("/api/tests", json=payload(1, [("Physics", 100, 0, 100)]))
    second = client.post("/api/tests", json=payload(2, [("Physics", 150, 0, 50)]))
    return first.json(), second.json()


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["app"] == "Score Analyser"


class TestTestRoutes:

    def test_create(self, client):
        response = client.post("/api/tests", json=payload(5, FULL_TEST))

        assert response.status_code == 201
        body = response.json()
        assert body["id"]
        assert body["totalQuestions"] == 200
        assert body["totalMarks"] == 800
        assert body["marksObtained"] == 570
        assert body["percentage"] == 71.25
        assert body["testDate"].startswith("2024-01-05T09:00:00")
        assert [s["subjectName"] for s in body["subjects"]] == ["Physics", "Chemistry", "Biology"]
        assert [s["weightage"] for s in body["subjects"]] == [25.0, 35.0, 40.0]
        assert "_id" not in body

    def test_create_without_date_uses_now(self, client):
        response = client.post("/api/tests", json=payload(1, FULL_TEST, test_date=False))

        assert response.status_code == 201
        assert response.json()["testDate"]

    def test_inconsistent_counts_rejected(self, client):
        body = payload(1, FULL_TEST)
        body["skippedQuestions"] = 0

        response = client.post("/api/tests", json=body)

        assert response.status_code == 400
        assert "must equal total questions" in response.json()["detail"]

    def test_zero_questions_rejected(self, client):
        body = {"totalQuestions": 0, "correctQuestions": 0, "incorrectQuestions": 0, "subjects": []}
        assert client.post("/api/tests", json=body).status_code == 400

    def test_negative_counts_rejected(self, client):
        body = payload(1, FULL_TEST)
        body["incorrectQuestions"] = -1
        assert client.post("/api/tests", json=body).status_code == 422

    def test_list_newest_first(self, client, created):
        first, second = created
        response = client.get("/api/tests")

        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == [second["id"], first["id"]]

    def test_get(self, client, created):
        first, _ = created
        assert client.get(f"/api/tests/{first['id']}").json() == first

    def test_get_missing(self, client):
        response = client.get("/api/tests/does-not-exist")

        assert response.status_code == 404
        assert response.json()["detail"] == "Test not found"

    def test_update(self, client, created):
        first, _ = created
        response = client.put(f"/api/tests/{first['id']}", json=payload(3, FULL_TEST))

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == first["id"]
        assert body["marksObtained"] == 570
        assert body["createdAt"] == first["createdAt"]
        assert len(body["subjects"]) == 3

    def test_update_missing(self, client):
        response = client.put("/api/tests/does-not-exist", json=payload(1, FULL_TEST))
        assert response.status_code == 404

    def test_update_invalid(self, client, created):
        first, _ = created
        body = payload(3, FULL_TEST)
        body["totalQuestions"] = 0
        assert client.put(f"/api/tests/{first['id']}", json=body).status_code == 400

    def test_delete(self, client, created):
        first, second = created

        response = client.delete(f"/api/tests/{first['id']}")

        assert response.status_code == 200
        assert response.json() == {"message": "Test deleted successfully"}
        assert [t["id"] for t in client.get("/api/tests").json()] == [second["id"]]
        assert client.delete(f"/api/tests/{first['id']}").status_code == 404


class TestAnalyticsRoutes:

    def test_empty_summary(self, client):
        assert client.get("/api/tests/analytics/summary").json() == {
            "totalTests": 0,
            "averageScore": 0,
            "averagePercentage": 0,
            "bestScore": 0,
            "worstScore": 0,
            "scoreVariance": 0,
            "improvement": 0,
            "percentile": 0,
            "latestScore": 0,
            "latestPercentage": 0,
        }

    def test_summary(self, client, created):
        summary = client.get("/api/tests/analytics/summary").json()

        assert summary["totalTests"] == 2
        assert summary["averageScore"] == 500
        assert summary["averagePercentage"] == 62.5
        assert summary["bestScore"] == 600
        assert summary["worstScore"] == 400
        assert summary["scoreVariance"] == 100
        assert summary["improvement"] == 50
        assert summary["percentile"] == 100
        assert summary["latestScore"] == 600
        assert summary["latestPercentage"] == 75

    def test_zero_baseline_improvement_is_null(self, client):
        client.post("/api/tests", json=payload(1, [("Physics", 2, 8, 0)]))
        client.post("/api/tests", json=payload(2, [("Physics", 10, 0, 0)]))

        summary = client.get("/api/tests/analytics/summary").json()
        subjects = client.get("/api/tests/analytics/subjects").json()

        assert summary["improvement"] is None
        assert subjects[0]["improvement"] is None

    def test_empty_subjects(self, client):
        assert client.get("/api/tests/analytics/subjects").json() == []

    def test_subjects(self, client, created):
        client.post("/api/tests", json=payload(3, FULL_TEST))

        subjects = client.get("/api/tests/analytics/subjects").json()

        assert [s["subjectName"] for s in subjects] == ["Physics", "Chemistry", "Biology"]
        physics = subjects[0]
        assert physics["scores"] == [400, 600, 155]
        assert physics["latestScore"] == 155
        assert physics["improvement"] == -74.17
        assert physics["totalContribution"] == 1155
        assert physics["weightage"] == 75.0
        assert physics["averageTotalQuestions"] == 150
        assert set(physics) >= {
            "averageCorrectQuestions",
            "averageIncorrectQuestions",
            "averageSkippedQuestions",
            "averageTotalMarks",
            "percentages",
        }

    def test_insights(self, client):
        client.post("/api/tests", json=payload(1, [("Physics", 10, 0, 0), ("Chemistry", 2, 4, 4)]))
        client.post("/api/tests", json=payload(2, [("Physics", 6, 0, 4), ("Chemistry", 4, 2, 4)]))

        insights = client.get("/api/tests/analytics/insights").json()

        assert insights == {
            "improvingSubjects": ["Chemistry"],
            "decliningSubjects": ["Physics"],
            "weakSubjects": ["Chemistry"],
        }

    def test_insights_threshold(self, client):
        client.post("/api/tests", json=payload(1, [("Physics", 10, 0, 0), ("Chemistry", 2, 4, 4)]))

        insights = client.get("/api/tests/analytics/insights", params={"threshold": 0}).json()

        assert insights["weakSubjects"] == []


class TestSubjectRoutes:

    def test_subjects(self, client, created):
        client.post("/api/tests", json=payload(3, FULL_TEST))
        assert client.get("/api/subjects").json() == ["Physics", "Chemistry", "Biology"]

    def test_no_subjects(self, client):
        assert client.get("/api/subjects").json() == []


class TestGoalRoutes:

    def test_default_goal(self, client):
        goal = client.get("/api/goals").json()

        assert goal["overallTargetScore"] == 800
        assert goal["subjectGoals"] == []

    def test_save_goal(self, client):
        body = {
            "overallTargetScore": 700,
            "subjectGoals": [{"subjectName": "Physics", "targetScore": 200}],
        }
        saved = client.post("/api/goals", json=body)

        assert saved.status_code == 200
        assert client.get("/api/goals").json() == saved.json()
        assert saved.json()["subjectGoals"] == [{"subjectName": "Physics", "targetScore": 200}]

    def test_duplicate_subject_goals_rejected(self, client):
        body = {
            "overallTargetScore": 700,
            "subjectGoals": [
                {"subjectName": "Physics", "targetScore": 200},
                {"subjectName": "Physics", "targetScore": 150},
            ],
        }
        assert client.post("/api/goals", json=body).status_code == 422

    def test_non_positive_target_rejected(self, client):
        assert client.post("/api/goals", json={"overallTargetScore": 0}).status_code == 422

    def test_progress(self, client):
        client.post("/api/tests", json=payload(1, FULL_TEST))
        client.post(
            "/api/goals",
            json={
                "overallTargetScore": 760,
                "subjectGoals": [
                    {"subjectName": "Physics", "targetScore": 310},
                    {"subjectName": "English", "targetScore": 100},
                ],
            },
        )

        progress = client.get("/api/goals/progress").json()

        assert progress["latestScore"] == 570
        assert progress["overallProgress"] == 75.0
        assert progress["subjects"] == [
            {"subjectName": "Physics", "targetScore": 310, "currentScore": 155, "progress": 50.0},
            {"subjectName": "English", "targetScore": 100, "currentScore": None, "progress": None},
        ]


class TestBackupRoutes:

    def test_export_import_clear(self, client, created):
        client.post("/api/goals", json={"overallTargetScore": 650})
        exported = client.get("/api/backup/export").json()

        assert len(exported["tests"]) == 2
        assert exported["goals"]["overallTargetScore"] == 650

        cleared = client.delete("/api/backup")
        assert cleared.status_code == 200
        assert client.get("/api/tests").json() == []
        assert client.get("/api/goals").json()["overallTargetScore"] == 800

        imported = client.post("/api/backup/import", json=exported)
        assert imported.status_code == 200
        assert imported.json()["tests"] == 2
        assert client.get("/api/tests/analytics/summary").json()["averageScore"] == 500
        assert client.get("/api/goals").json()["overallTargetScore"] == 650

    def test_export_without_goal_can_be_imported(self, client, created):
        exported = client.get("/api/backup/export").json()
        assert exported["goals"] == {}

        response = client.post("/api/backup/import", json=exported)

        assert response.status_code == 200
        assert response.json() == {"message": "Data imported successfully", "tests": 2, "goals": False}

    def test_import_tests_only(self, client, created):
        client.post("/api/goals", json={"overallTargetScore": 650})

        response = client.post("/api/backup/import", json={"tests": []})

        assert response.json()["goals"] is False
        assert client.get("/api/tests").json() == []
        assert client.get("/api/goals").json()["overallTargetScore"] == 650


def browser_backup_record(record_id="lq3abc9x2"):
    """A test as the browser app exports it: keyed by _id, with Mongoose extras."""
    return {
        "_id": record_id,
        "__v": 0,
        "testDate": "2024-02-01T09:00:00.000Z",
        "totalMarks": 40,
        "marksObtained": 35,
        "totalQuestions": 10,
        "correctQuestions": 9,
        "incorrectQuestions": 1,
        "skippedQuestions": 0,
        "percentage": 87.5,
        "subjects": [
            {
                "_id": "65b9f0c2a1",
                "subjectName": "Physics",
                "totalQuestions": 10,
                "correctQuestions": 9,
                "incorrectQuestions": 1,
                "skippedQuestions": 0,
                "marksObtained": 35,
                "totalMarks": 40,
                "percentage": 87.5,
                "weightage": 100,
            }
        ],
        "createdAt": "2024-02-01T09:05:00.000Z",
        "updatedAt": "2024-02-01T09:05:00.000Z",
    }


class TestBackupIntegrity:

    def test_browser_backup_is_restored(self, client):
        backup = {
            "tests": [browser_backup_record()],
            "goals": {
                "_id": "65b9f0c2ff",
                "overallTargetScore": 700,
                "subjectGoals": [{"_id": "65b9f0c300", "subjectName": "Physics", "targetScore": 40}],
                "createdAt": "2024-01-20T10:00:00.000Z",
                "updatedAt": "2024-01-20T10:00:00.000Z",
            },
        }

        response = client.post("/api/backup/import", json=backup)

        assert response.status_code == 200
        tests = client.get("/api/tests").json()
        assert [t["id"] for t in tests] == ["lq3abc9x2"]
        assert "_id" not in tests[0]
        assert client.get("/api/tests/lq3abc9x2").json()["marksObtained"] == 35
        progress = client.get("/api/goals/progress").json()
        assert progress["latestScore"] == 35
        assert progress["overallProgress"] == 5.0
        assert progress["subjects"][0]["progress"] == 87.5

    def test_duplicate_ids_rejected(self, client, created):
        backup = {"tests": [browser_backup_record("dup"), browser_backup_record("dup")]}

        response = client.post("/api/backup/import", json=backup)

        assert response.status_code == 400
        assert "Duplicate test id 'dup'" in response.json()["detail"]
        assert len(client.get("/api/tests").json()) == 2

    def test_marks_that_disagree_with_counts_rejected(self, client, created):
        record = browser_backup_record("bad")
        record["marksObtained"] = 20

        response = client.post("/api/backup/import", json={"tests": [record]})

        assert response.status_code == 400
        assert "do not match" in response.json()["detail"]
        summary = client.get("/api/tests/analytics/summary").json()
        assert summary["totalTests"] == 2
        assert summary["worstScore"] == 400

    def test_inconsistent_counts_rejected(self, client):
        record = browser_backup_record()
        record["skippedQuestions"] = 3

        response = client.post("/api/backup/import", json={"tests": [record]})

        assert response.status_code == 400
        assert client.get("/api/tests").json() == []

    def test_percentage_and_weightage_are_recomputed(self, client):
        record = browser_backup_record()
        record["percentage"] = 12.0
        record["subjects"][0]["weightage"] = 55

        client.post("/api/backup/import", json={"tests": [record]})

        stored = client.get("/api/tests/lq3abc9x2").json()
        assert stored["percentage"] == 87.5
        assert stored["subjects"][0]["weightage"] == 100.0
