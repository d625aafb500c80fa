"""Prompt templates for the AI assist endpoints."""

from __future__ import annotations

from typing import Iterable, Sequence

ISSUE_CATEGORIES = (
	"infrastructure",
	"safety",
	"environment",
	"transportation",
	"housing",
	"utilities",
	"community",
	"other",
)

SYSTEM_PROMPT = (
	"You are an assistant for a civic engagement platform where residents report local issues "
	"and organise community events. Be factual, neutral and concise."
)


def categorize(title: str, description: str) -> str:
	return (
		"Analyze this civic issue and categorize it:\n\n"
		f"Title: {title}\n"
		f"Description: {description}\n\n"
		"Categorize this issue into one of the predefined categories, assign a priority level based on "
		"urgency and impact, suggest relevant tags, and provide a confidence score for your analysis.\n\n"
		"Respond with a JSON object with the keys:\n"
		f'- "category": one of {", ".join(ISSUE_CATEGORIES)}\n'
		'- "priority": one of low, medium, high, urgent\n'
		'- "tags": an array of short lowercase strings\n'
		'- "confidence": a number between 0 and 1'
	)


def moderate(content: str) -> str:
	return (
		"Review this content for appropriateness in a civic engagement platform:\n\n"
		f"Content: {content}\n\n"
		"Check for:\n"
		"- Hate speech or discriminatory language\n"
		"- Personal attacks or harassment\n"
		"- Spam or irrelevant content\n"
		"- Inappropriate language for a public forum\n"
		"- Misinformation or false claims\n\n"
		"If inappropriate, provide a reason and suggest an edited version if possible.\n\n"
		'Respond with a JSON object with the keys "is_appropriate" (boolean), '
		'"reason" (string, optional) and "suggested_edit" (string, optional).'
	)


def summarize(title: str, description: str, *, upvotes: int, comments: Sequence[str]) -> str:
	comment_lines = "\n".join(comments) if comments else "(no comments)"
	return (
		"Create a concise summary of this civic issue for administrators:\n\n"
		f"Title: {title}\n"
		f"Description: {description}\n"
		f"Votes: {upvotes}\n"
		f"Comments: {comment_lines}\n\n"
		"Provide a 2-3 sentence summary highlighting the key points, community sentiment, "
		"and any actionable insights."
	)


def solutions(title: str, description: str, category: str) -> str:
	return (
		"Suggest practical solutions for this civic issue:\n\n"
		f"Title: {title}\n"
		f"Description: {description}\n"
		f"Category: {category}\n\n"
		"Provide 3-5 actionable solutions that local government or community organizations could "
		"implement. Focus on realistic, cost-effective approaches. Put each solution on its own line."
	)


def engagement(issues: Iterable[dict]) -> str:
	lines = []
	for issue in issues:
		lines.append(
			f"- {issue['title']} ({issue['category']})\n"
			f"  Votes: {issue['votes']}, Comments: {issue['comments']}\n"
			f"  Date: {issue['created_at']}"
		)
	body = "\n".join(lines) if lines else "(no issues reported yet)"
	return (
		"Analyze community engagement patterns from these civic issues:\n\n"
		f"{body}\n\n"
		"Provide insights about community engagement, identify trends in issue types and participation, "
		"and recommend strategies to improve civic engagement.\n\n"
		'Respond with a JSON object with the keys "insights" (string), "trends" (array of strings) '
		'and "recommendations" (array of strings).'
	)
