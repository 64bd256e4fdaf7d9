"""``opt_fields`` selections sent with each Asana request.

Asana returns only ``gid`` and a handful of compact fields unless asked for
more. Each constant is the comma-separated selection used for one resource
kind; a caller-supplied ``opt_fields`` list replaces it.
"""


def _join(*fields: str) -> str:
    return ",".join(fields)


PROJECT_FIELDS = _join(
    "gid", "name", "color", "archived", "public",
    "owner", "owner.name", "team", "team.name", "workspace", "workspace.name",
    "current_status_update", "current_status_update.gid", "current_status_update.status_type",
    "current_status_update.title", "current_status_update.text",
    "notes", "created_at", "modified_at", "due_date", "due_on", "start_on", "permalink_url", "icon",
)  # fmt: skip

PORTFOLIO_FIELDS = _join(
    "gid", "name", "color", "owner", "owner.name", "workspace",
    "current_status_update", "current_status_update.gid", "current_status_update.status_type",
    "current_status_update.title", "current_status_update.text",
    "created_at", "created_by", "permalink_url", "public",
)  # fmt: skip

# Minimal selection: enough to decide how an item expands.
PORTFOLIO_ITEMS_FIELDS = "gid,resource_type,name"

TASK_FULL_FIELDS = _join(
    "gid", "name", "resource_type", "completed", "completed_at",
    "completed_by", "completed_by.name", "assignee", "assignee.name", "assignee.email",
    "due_on", "due_at", "start_on", "start_at", "notes", "html_notes", "created_at", "created_by",
    "created_by.name", "modified_at", "permalink_url", "parent", "parent.name", "num_likes",
    "num_subtasks", "liked", "projects", "projects.name", "workspace", "workspace.name",
    "tags", "tags.name", "memberships", "memberships.project", "memberships.project.name",
    "memberships.section", "memberships.section.name", "assignee_section", "assignee_section.name",
)  # fmt: skip

RECURSIVE_TASK_FIELDS = _join(
    "gid", "name", "resource_type", "completed", "completed_at",
    "assignee", "assignee.name", "due_on", "due_at", "start_on", "notes", "created_at", "modified_at",
    "permalink_url", "parent", "parent.name", "num_likes", "num_subtasks", "liked",
    "projects", "projects.name", "workspace", "tags", "memberships", "memberships.project",
    "memberships.project.name", "memberships.section", "memberships.section.name",
)  # fmt: skip

SUBTASK_FIELDS = "gid,name,completed,assignee,assignee.name,due_on,num_subtasks"

STORY_FIELDS = _join(
    "gid", "created_at", "created_by", "created_by.name",
    "resource_subtype", "text", "html_text", "is_pinned", "is_edited", "num_likes", "liked",
)  # fmt: skip

STATUS_UPDATE_FIELDS = _join(
    "gid", "title", "text", "html_text", "status_type",
    "created_at", "created_by", "created_by.name", "modified_at", "parent", "parent.name",
)  # fmt: skip

WORKSPACE_FIELDS = "gid,name,is_organization"

TEMPLATE_FIELDS = _join(
    "gid", "name", "description", "html_description", "owner", "owner.name",
    "team", "team.name", "public", "requested_dates", "requested_dates.gid", "requested_dates.name",
    "requested_dates.description", "requested_roles", "requested_roles.gid", "requested_roles.name", "color",
)  # fmt: skip

SECTION_FIELDS = "gid,name,project,project.name,created_at"

TAG_FIELDS = "gid,name,color,notes,workspace,workspace.name,created_at,permalink_url"

USER_FIELDS = "gid,name,email,photo,workspaces,workspaces.name"

TEAM_FIELDS = "gid,name,description,html_description,organization,permalink_url"

CUSTOM_FIELD_SETTINGS_FIELDS = _join(
    "gid", "custom_field", "custom_field.gid",
    "custom_field.name", "custom_field.type", "custom_field.enum_options",
    "custom_field.enum_options.gid", "custom_field.enum_options.name",
    "custom_field.enum_options.color", "custom_field.precision",
    "custom_field.currency_code", "is_important", "project",
)  # fmt: skip

SEARCH_FIELDS = _join(
    "gid", "name", "completed", "assignee", "assignee.name",
    "due_on", "start_on", "projects", "projects.name", "tags", "tags.name", "permalink_url",
)  # fmt: skip

# Key resources brief on the project Overview tab (not the Note tab).
PROJECT_BRIEF_FIELDS = "gid,title,text,html_text,permalink_url,project,project.name"

# The brief embedded in a project, read through the project itself.
PROJECT_EMBEDDED_BRIEF_FIELDS = _join(
    "project_brief", "project_brief.text", "project_brief.html_text",
    "project_brief.title", "project_brief.permalink_url",
)  # fmt: skip

# Dependencies and dependents of a task.
TASK_LINK_FIELDS = "gid,name,resource_type"

FAVORITE_FIELDS = "gid,resource_type,name"

TYPEAHEAD_FIELDS = "gid,name,resource_type"

__all__ = [
    "CUSTOM_FIELD_SETTINGS_FIELDS",
    "FAVORITE_FIELDS",
    "PORTFOLIO_FIELDS",
    "PORTFOLIO_ITEMS_FIELDS",
    "PROJECT_BRIEF_FIELDS",
    "PROJECT_EMBEDDED_BRIEF_FIELDS",
    "PROJECT_FIELDS",
    "RECURSIVE_TASK_FIELDS",
    "SEARCH_FIELDS",
    "SECTION_FIELDS",
    "STATUS_UPDATE_FIELDS",
    "STORY_FIELDS",
    "SUBTASK_FIELDS",
    "TAG_FIELDS",
    "TASK_FULL_FIELDS",
    "TASK_LINK_FIELDS",
    "TEAM_FIELDS",
    "TEMPLATE_FIELDS",
    "TYPEAHEAD_FIELDS",
    "USER_FIELDS",
    "WORKSPACE_FIELDS",
]
