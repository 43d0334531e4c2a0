"""Prompt template and fixed messages used when answering questions."""

NO_CONTEXT_MARKER = "No relevant information found."

FALLBACK_ANSWER = "Sorry, I could not generate an answer. Please try again."

RAG_ANSWER_PROMPT = """You are an expert technical assistant for Fidgetech.
Use the following retrieved information to answer the user's question.
If the information does not contain the answer, state that you cannot find the answer in the provided documents.
Be concise and helpful.

Retrieved Information:
{context}

User's Question: {question}"""


def build_answer_prompt(question: str, chunks) -> str:
    context = "\n".join(f"- {chunk}" for chunk in chunks) if chunks else NO_CONTEXT_MARKER
    return RAG_ANSWER_PROMPT.format(context=context, question=question)
