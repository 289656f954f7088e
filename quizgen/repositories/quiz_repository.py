import logging
from typing import List, Optional, Tuple
from supabase import Client

from ..core.errors import PersistenceError
from ..schemas.quiz_schemas import QuizIn

logger = logging.getLogger(__name__)


def _returned_id(res, table: str) -> int:
    # supabase-py v2 returns the inserted representation as a list of rows
    if not res.data or not isinstance(res.data, list) or "id" not in res.data[0]:
        raise PersistenceError(f"Insert into {table} failed: no returned id")
    return res.data[0]["id"]


class QuizRepository:
    def __init__(self, client: Client) -> None:
        self.client = client

    # --- write ---

    def create_quiz(self, quiz: QuizIn, user_id: Optional[str] = None) -> int:
        """
        Writes the quiz, then each question followed by its answers.

        PostgREST has no multi-request transactions, so a failure part way
        through deletes whatever was written before re-raising.
        """
        try:
            quiz_ins = (
                self.client.table("quizzes")
                .insert({"name": quiz.name, "description": quiz.description, "user_id": user_id})
                .execute()
            )
        except Exception as e:
            raise PersistenceError(f"Could not save quiz: {e}") from e
        quiz_id = _returned_id(quiz_ins, "quizzes")

        question_ids: List[int] = []
        try:
            for q in quiz.questions:
                q_ins = (
                    self.client.table("questions")
                    .insert({"question_text": q.questionText, "quizz_id": quiz_id})
                    .execute()
                )
                question_id = _returned_id(q_ins, "questions")
                question_ids.append(question_id)

                rows = [
                    {
                        "question_id": question_id,
                        "answer_text": a.answerText,
                        "is_correct": a.isCorrect,
                    }
                    for a in q.answers
                ]
                if rows:
                    self.client.table("answers").insert(rows).execute()
        except Exception as e:
            logger.error("Saving quiz %s failed, rolling back: %s", quiz_id, e)
            try:
                self._delete_rows(quiz_id, question_ids)
            except Exception as cleanup_error:
                logger.error("Rollback of quiz %s failed: %s", quiz_id, cleanup_error)
            if isinstance(e, PersistenceError):
                raise
            raise PersistenceError(f"Could not save quiz: {e}") from e

        logger.info("Saved quiz %s with %d questions", quiz_id, len(question_ids))
        return quiz_id

    def create_submission(self, quiz_id: int, score: int) -> int:
        res = (
            self.client.table("quizz_submissions")
            .insert({"quizz_id": quiz_id, "score": score})
            .execute()
        )
        return _returned_id(res, "quizz_submissions")

    # --- read ---

    def list_quizzes(self, user_id: str) -> List[dict]:
        res = (
            self.client.table("quizzes")
            .select("id,name,description")
            .eq("user_id", user_id)
            .order("id", desc=True)
            .execute()
        )
        return res.data or []

    def get_quiz(self, quiz_id: int) -> Optional[dict]:
        res = (
            self.client.table("quizzes")
            .select("*")
            .eq("id", quiz_id)
            .limit(1)
            .execute()
        )
        return res.data[0] if res.data else None

    def get_quiz_with_questions(self, quiz_id: int) -> Optional[Tuple[dict, List[dict]]]:
        """Quiz row plus its questions in insertion order, each with an ``answers`` list."""
        quiz = self.get_quiz(quiz_id)
        if not quiz:
            return None

        q_res = (
            self.client.table("questions")
            .select("*")
            .eq("quizz_id", quiz_id)
            .order("id", desc=False)
            .execute()
        )
        questions = q_res.data or []
        if not questions:
            return quiz, []

        a_res = (
            self.client.table("answers")
            .select("*")
            .in_("question_id", [q["id"] for q in questions])
            .order("id", desc=False)
            .execute()
        )
        by_question: dict = {}
        for a in a_res.data or []:
            by_question.setdefault(a["question_id"], []).append(a)

        return quiz, [{**q, "answers": by_question.get(q["id"], [])} for q in questions]

    def list_submissions(self, quiz_id: int) -> List[dict]:
        res = (
            self.client.table("quizz_submissions")
            .select("id,score,created_at")
            .eq("quizz_id", quiz_id)
            .order("created_at", desc=True)
            .execute()
        )
        return res.data or []

    # --- delete ---

    def delete_quiz(self, quiz_id: int) -> None:
        q_res = self.client.table("questions").select("id").eq("quizz_id", quiz_id).execute()
        question_ids = [q["id"] for q in q_res.data or []]
        self.client.table("quizz_submissions").delete().eq("quizz_id", quiz_id).execute()
        self._delete_rows(quiz_id, question_ids)

    def _delete_rows(self, quiz_id: int, question_ids: List[int]) -> None:
        # children first; the schema does not cascade
        if question_ids:
            self.client.table("answers").delete().in_("question_id", question_ids).execute()
        self.client.table("questions").delete().eq("quizz_id", quiz_id).execute()
        self.client.table("quizzes").delete().eq("id", quiz_id).execute()
