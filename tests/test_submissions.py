"""
Test: Submission store: server-side grading against the authoritative key.
"""
import pytest

from gabarito.errors import AssessmentNotFound, InvalidInput, NoAnswerKey


class TestSubmit:
    def test_prova_1_end_to_end(self, submissions, prova_1):
        submission = submissions.submit(prova_1.id, "Maria", [
            {"questionNumber": 1, "answer": "A"},
            {"questionNumber": 2, "answer": "A"},
        ])
        stored = submissions.list_by_assessment(prova_1.id)[0]
        assert stored.id == submission.id
        assert [(a.question_number, a.answer, a.is_correct) for a in stored.answers] == [
            (1, "A", True),
            (2, "A", False),
        ]
        assert [a.subject for a in stored.answers] == ["Física", "Física"]
        assert (stored.score, stored.total) == (1, 2)

    def test_client_correctness_discarded(self, submissions, catalog):
        assessment = catalog.create_assessment("Prova 1", 1, [{"number": 1, "subject": "Física"}])
        catalog.save_answer_key(assessment.id, [{"questionNumber": 1, "correctAnswer": "B"}])
        submission = submissions.submit(assessment.id, "Maria", [
            {"questionNumber": 1, "answer": "A", "isCorrect": True},
        ])
        assert submission.answers[0].is_correct is False

    def test_grades_against_newest_key(self, submissions, catalog, prova_1):
        catalog.save_answer_key(prova_1.id, [
            {"questionNumber": 1, "correctAnswer": "C"},
            {"questionNumber": 2, "correctAnswer": "A"},
        ])
        submission = submissions.submit(prova_1.id, "Maria", [
            {"questionNumber": 1, "answer": "A"},
            {"questionNumber": 2, "answer": "A"},
        ])
        assert [a.is_correct for a in submission.answers] == [False, True]

    def test_partial_answers_allowed(self, submissions, prova_1):
        submission = submissions.submit(prova_1.id, "Maria", [{"questionNumber": 2, "answer": "B"}])
        assert len(submission.answers) == 1
        assert submission.answers[0].is_correct is True

    def test_identity_link(self, submissions, prova_1):
        submission = submissions.submit(prova_1.id, "Maria", [{"questionNumber": 1, "answer": "A"}],
                                        identity_id="student-7")
        assert submission.identity_id == "student-7"

    def test_name_whitespace_collapsed(self, submissions, prova_1):
        submission = submissions.submit(prova_1.id, "  Maria   da  Silva ", [{"questionNumber": 1, "answer": "A"}])
        assert submission.student_name == "Maria da Silva"

    def test_no_answer_key(self, submissions, catalog):
        assessment = catalog.create_assessment("Prova 1", 1, [{"number": 1, "subject": "Física"}])
        with pytest.raises(NoAnswerKey):
            submissions.submit(assessment.id, "Maria", [{"questionNumber": 1, "answer": "A"}])

    def test_unknown_assessment(self, submissions):
        with pytest.raises(AssessmentNotFound):
            submissions.submit("missing", "Maria", [{"questionNumber": 1, "answer": "A"}])

    def test_blank_name(self, submissions, prova_1):
        with pytest.raises(InvalidInput):
            submissions.submit(prova_1.id, "   ", [{"questionNumber": 1, "answer": "A"}])

    def test_no_answers(self, submissions, prova_1):
        with pytest.raises(InvalidInput):
            submissions.submit(prova_1.id, "Maria", [])


class TestListByAssessment:
    def test_newest_first(self, submissions, prova_1):
        first = submissions.submit(prova_1.id, "Ana", [{"questionNumber": 1, "answer": "A"}])
        second = submissions.submit(prova_1.id, "Bruno", [{"questionNumber": 1, "answer": "B"}])
        assert [s.id for s in submissions.list_by_assessment(prova_1.id)] == [second.id, first.id]

    def test_empty(self, submissions, prova_1):
        assert submissions.list_by_assessment(prova_1.id) == []
