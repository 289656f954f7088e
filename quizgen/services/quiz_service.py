import logging
from typing import List, Optional
from ..repositories.quiz_repository import QuizRepository

logger = logging.getLogger(__name__)

class QuizService:
    def __init__(self, repo: QuizRepository) -> None:
        self.repo = repo

    def list_quizzes(self, user_id: str) -> list[dict]:
        items = self.repo.list_quizzes(user_id)
        return [
            {
                "id": i["id"],
                "name": i["name"],
                "description": i["description"],
            }
            for i in items
        ]

    def get_quiz(self, quiz_id: int) -> Optional[dict]:
        res = self.repo.get_quiz_with_questions(quiz_id)
        if not res:
            return None
        quiz, questions = res
        return {
            "id": quiz["id"],
            "name": quiz["name"],
            "description": quiz["description"],
            "questions": [
                {
                    "id": q["id"],
                    "questionText": q["question_text"],
                    "answers": [
                        {
                            "id": a["id"],
                            "answerText": a["answer_text"],
                            "isCorrect": bool(a["is_correct"]),
                        }
                        for a in q["answers"]
                    ],
                }
                for q in questions
            ],
        }

    def get_quiz_row(self, quiz_id: int) -> Optional[dict]:
        return self.repo.get_quiz(quiz_id)

    def quiz_exists(self, quiz_id: int) -> bool:
        return self.repo.get_quiz(quiz_id) is not None

    def delete_quiz(self, quiz_id: int) -> None:
        self.repo.delete_quiz(quiz_id)

    def submit_answers(self, quiz_id: int, answers: List[dict]) -> Optional[dict]:
        """
        Scores one point per question whose chosen answer is correct.
        Choices for questions outside the quiz, and repeat choices for the
        same question, are ignored.
        """
        res = self.repo.get_quiz_with_questions(quiz_id)
        if not res:
            return None
        _, questions = res

        correct = {
            q["id"]: {a["id"] for a in q["answers"] if a["is_correct"]}
            for q in questions
        }
        score = 0
        seen = set()
        for choice in answers:
            question_id = choice["questionId"]
            if question_id not in correct or question_id in seen:
                continue
            seen.add(question_id)
            if choice["answerId"] in correct[question_id]:
                score += 1

        submission_id = self.repo.create_submission(quiz_id, score)
        logger.info("Quiz %s submission %s scored %d/%d", quiz_id, submission_id, score, len(questions))
        return {"submissionId": submission_id, "score": score, "total": len(questions)}

    def list_submissions(self, quiz_id: int) -> list[dict]:
        return [
            {
                "id": s["id"],
                "score": s["score"],
                # PostgREST serialises timestamps as ISO strings
                "createdAt": str(s["created_at"]),
            }
            for s in self.repo.list_submissions(quiz_id)
        ]
