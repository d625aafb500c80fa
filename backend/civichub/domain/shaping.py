"""Response shaping: map domain rows onto the external JSON contract.

Each entity type has one shaping function. Routers never hand raw rows to
the client; they pick a shaper from `SHAPERS` (or call it directly).
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

from pydantic import BaseModel

from civichub.domain import models

Shaped = dict[str, Any]


def _person(
	user_id: Any,
	*,
	first_name: Optional[str],
	last_name: Optional[str],
	display_name: Optional[str],
	avatar_url: Optional[str],
) -> Optional[Shaped]:
	if first_name is None and last_name is None and display_name is None and avatar_url is None:
		return None
	return {
		"id": user_id,
		"first_name": first_name,
		"last_name": last_name,
		"display_name": display_name,
		"avatar_url": avatar_url,
	}


def shape_profile_public(profile: models.Profile) -> Shaped:
	return {
		"id": profile.id,
		"first_name": profile.first_name,
		"last_name": profile.last_name,
		"display_name": profile.display_name,
		"avatar_url": profile.avatar_url,
		"bio": profile.bio,
		"city": profile.city,
		"state": profile.state,
		"role": profile.role,
		"created_at": profile.created_at,
	}


def shape_profile_full(profile: models.Profile) -> Shaped:
	"""Public fields plus contact details, for the profile owner and admins."""
	shaped = shape_profile_public(profile)
	shaped.update(
		{
			"email": profile.email,
			"phone": profile.phone,
			"address": profile.address,
			"zip_code": profile.zip_code,
			"is_active": profile.is_active,
			"updated_at": profile.updated_at,
		}
	)
	return shaped


def shape_category(category: models.Category) -> Shaped:
	return category.model_dump()


def shape_issue(issue: models.Issue) -> Shaped:
	"""Shape an issue; anonymous reports keep `reporter_id` but drop the reporter's name."""
	category = None
	if issue.category_id is not None and issue.category_name is not None:
		category = {
			"id": issue.category_id,
			"name": issue.category_name,
			"icon": issue.category_icon,
			"color": issue.category_color,
		}
	reporter = None
	if not issue.is_anonymous:
		reporter = _person(
			issue.reporter_id,
			first_name=issue.reporter_first_name,
			last_name=issue.reporter_last_name,
			display_name=issue.reporter_display_name,
			avatar_url=issue.reporter_avatar_url,
		)
	return {
		"id": issue.id,
		"title": issue.title,
		"description": issue.description,
		"category_id": issue.category_id,
		"category": category,
		"priority": issue.priority,
		"status": issue.status,
		"reporter_id": issue.reporter_id,
		"reporter": reporter,
		"assigned_to": issue.assigned_to,
		"location_address": issue.location_address,
		"latitude": issue.latitude,
		"longitude": issue.longitude,
		"image_urls": list(issue.image_urls),
		"is_anonymous": issue.is_anonymous,
		"view_count": issue.view_count,
		"admin_notes": issue.admin_notes,
		"votes": {"up": issue.upvotes, "down": issue.downvotes},
		"comment_count": issue.comment_count,
		"created_at": issue.created_at,
		"updated_at": issue.updated_at,
	}


def shape_admin_issue(issue: models.Issue) -> Shaped:
	shaped = shape_issue(issue)
	shaped["upvotes"] = issue.upvotes
	shaped["downvotes"] = issue.downvotes
	# admins always see who reported
	shaped["reporter"] = _person(
		issue.reporter_id,
		first_name=issue.reporter_first_name,
		last_name=issue.reporter_last_name,
		display_name=issue.reporter_display_name,
		avatar_url=issue.reporter_avatar_url,
	)
	return shaped


def shape_issue_update(update: models.IssueUpdate) -> Shaped:
	return update.model_dump()


def shape_vote(vote: models.Vote) -> Shaped:
	return {"issue_id": vote.issue_id, "user_id": vote.user_id, "vote_type": vote.vote_type, "created_at": vote.created_at}


def shape_comment(comment: models.Comment) -> Shaped:
	return {
		"id": comment.id,
		"issue_id": comment.issue_id,
		"user_id": comment.user_id,
		"content": comment.content,
		"parent_comment_id": comment.parent_comment_id,
		"is_official": comment.is_official,
		"author": _person(
			comment.user_id,
			first_name=comment.author_first_name,
			last_name=comment.author_last_name,
			display_name=comment.author_display_name,
			avatar_url=comment.author_avatar_url,
		),
		"created_at": comment.created_at,
		"updated_at": comment.updated_at,
	}


def shape_event(event: models.Event) -> Shaped:
	return {
		"id": event.id,
		"title": event.title,
		"description": event.description,
		"organizer_id": event.organizer_id,
		"organizer": _person(
			event.organizer_id,
			first_name=event.organizer_first_name,
			last_name=event.organizer_last_name,
			display_name=event.organizer_display_name,
			avatar_url=event.organizer_avatar_url,
		),
		"event_date": event.event_date,
		"location_address": event.location_address,
		"latitude": event.latitude,
		"longitude": event.longitude,
		"max_attendees": event.max_attendees,
		"current_attendees": event.current_attendees,
		"is_public": event.is_public,
		"image_url": event.image_url,
		"created_at": event.created_at,
		"updated_at": event.updated_at,
	}


def shape_attendance(attendance: models.Attendance) -> Shaped:
	return {
		"event_id": attendance.event_id,
		"user_id": attendance.user_id,
		"status": attendance.status,
		"user": _person(
			attendance.user_id,
			first_name=attendance.user_first_name,
			last_name=attendance.user_last_name,
			display_name=attendance.user_display_name,
			avatar_url=attendance.user_avatar_url,
		),
		"created_at": attendance.created_at,
		"updated_at": attendance.updated_at,
	}


def shape_notification(notification: models.Notification) -> Shaped:
	return notification.model_dump()


SHAPERS: dict[str, Callable[[Any], Shaped]] = {
	"profile": shape_profile_public,
	"profile_full": shape_profile_full,
	"category": shape_category,
	"issue": shape_issue,
	"admin_issue": shape_admin_issue,
	"issue_update": shape_issue_update,
	"vote": shape_vote,
	"comment": shape_comment,
	"event": shape_event,
	"attendance": shape_attendance,
	"notification": shape_notification,
}


def shape(kind: str, row: BaseModel) -> Shaped:
	return SHAPERS[kind](row)


def shape_many(kind: str, rows: Iterable[BaseModel]) -> list[Shaped]:
	shaper = SHAPERS[kind]
	return [shaper(row) for row in rows]
