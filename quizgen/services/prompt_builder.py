from typing import Iterable

QUIZ_PROMPT = """Given the text which is a summary of the document, generate a quiz based on the text using the following JSON schema:

Quiz = {
  "name": string,
  "description": string,
  "questions": Array<{
    "questionText": string,
    "answers": Array<{
      "answerText": string,
      "isCorrect": boolean
    }>
  }>
}

Return: Quiz"""


def build_prompt(texts: Iterable[str]) -> str:
    return QUIZ_PROMPT + "\n" + "\n".join(texts)
