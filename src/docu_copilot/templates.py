"""Document skeletons and completion checklists, keyed by document type."""

from .persistence import slugify

PRD_SKELETON = """# {title}

## Executive Summary
*Brief overview of the product, its purpose, and key value proposition.*

### Problem Statement
*[What specific problem does {title} solve? Who feels it most?]*

### Solution Overview
*[Your proposed solution and the key capabilities that address the problem.]*

## Product Objectives

### Primary Goals
- *[2-3 primary objectives this product aims to achieve]*

### Success Metrics
- *[Measurable outcomes that indicate success]*

## User Personas

### Primary User
- **Who:** *[Description of primary user]*
- **Needs:** *[Key needs and pain points]*
- **Goals:** *[What they want to accomplish]*

### Secondary Users
- *[Additional user types if applicable]*

## Functional Requirements

### Core Features
1. *[Essential feature 1]*
2. *[Essential feature 2]*

### Nice-to-Have Features
- *[Features for future consideration]*

## Constraints
- **Technical:** *[Platform, performance, integration, security]*
- **Business:** *[Timeline, budget, resources]*

## Success Criteria
- **Launch:** *[What needs to be true for launch]*
- **Post-launch:** *[How success will be measured after launch]*
"""

REQUIREMENTS_SKELETON = """# {title} — Requirements

## Introduction
*[Summarize the feature and reference the PRD it derives from.]*

## Functional Requirements

### Requirement 1
**User Story:** As a *[role]*, I want *[feature]*, so that *[benefit]*

#### Acceptance Criteria
1. WHEN *[event]* THEN the system SHALL *[response]*
2. IF *[precondition]* THEN the system SHALL *[response]*

## Non-Functional Requirements
- **Performance:** *[Response times, throughput]*
- **Security:** *[Authentication, data protection]*
- **Reliability:** *[Availability, recovery]*

## Out of Scope
- *[What this release will not do]*
"""

DESIGN_SKELETON = """# {title} — Design

## Overview
*[Purpose of the design and the requirements it satisfies.]*

## System Architecture
*[Architectural style, main layers, deployment shape.]*

## Components
- **[Component]:** *[Responsibility and interface]*

## Data Models
- **[Entity]:** *[Fields and relationships]*

## Integrations
- *[External systems, APIs, protocols]*

## Error Handling
*[Failure modes and how each is surfaced or recovered.]*

## Testing Strategy
*[Unit, integration and end-to-end coverage.]*
"""

TASKS_SKELETON = """# {title} — Implementation Plan

## Implementation Tasks

- [ ] 1. *[Set up project structure and core interfaces]*
  - *[Sub-task detail]*
  - _Requirements: [ref]_
- [ ] 2. *[Implement data models]*
- [ ] 3. *[Implement core services]*
- [ ] 4. *[Wire components together and add integration tests]*

## Dependencies
- *[Task ordering and critical path]*

## Timeline
- *[Milestones and target dates]*
"""

GENERIC_SKELETON = """# {title}

## Overview
*[Please add your content here]*

## Details
*[Add detailed information]*

## Next Steps
*[List action items]*
"""

SKELETONS = {
    "prd": PRD_SKELETON,
    "requirements": REQUIREMENTS_SKELETON,
    "design": DESIGN_SKELETON,
    "tasks": TASKS_SKELETON,
}

CHECKLISTS = {
    "prd": (
        "Problem statement is specific and compelling",
        "Target users are clearly defined",
        "Solution approach and value proposition are explained",
        "Success metrics are measurable",
        "Core features are prioritized (must-have vs nice-to-have)",
        "Technical and business constraints are identified",
    ),
    "requirements": (
        "Every requirement has a user story",
        "Acceptance criteria use WHEN/IF ... THEN ... SHALL",
        "Non-functional requirements have measurable targets",
        "Each requirement traces back to the PRD",
        "Out-of-scope items are listed",
    ),
    "design": (
        "Architecture covers every requirement",
        "Component responsibilities and interfaces are defined",
        "Data models and relationships are documented",
        "Error handling is described for each failure mode",
        "Testing strategy is stated",
    ),
    "tasks": (
        "Each task is completable in 1-4 hours",
        "Tasks reference the requirements they satisfy",
        "Dependencies and ordering are explicit",
        "Testing is part of each task, not a final phase",
    ),
}

GENERIC_CHECKLIST = (
    "Document structure and formatting are consistent",
    "All sections are complete",
    "Content is consistent with project standards",
)

OFFLINE_CAPABILITIES = (
    "Document templates and skeletons",
    "Completion checklists and review guidance",
    "File operations (read, write, insert section)",
    "Basic commands: /new, /template, /help, /status",
)

OFFLINE_LIMITATIONS = (
    "AI-powered content generation",
    "Document review and suggestions",
    "Multi-turn guided conversations",
    "Context-aware responses",
)


def render_skeleton(document_type: str, title: str) -> str:
    return SKELETONS.get(document_type, GENERIC_SKELETON).format(title=title)


def checklist_for(document_type: str) -> tuple[str, ...]:
    return CHECKLISTS.get(document_type, GENERIC_CHECKLIST)


def render_checklist(document_type: str) -> str:
    return "\n".join(f"- [ ] {item}" for item in checklist_for(document_type))


# Canonical file names for documents that are not named after their title
CANONICAL_FILES = {
    "requirements": "requirements.md",
    "design": "design.md",
    "tasks": "tasks.md",
}


def default_document_path(document_type: str, title: str, directory: str) -> str:
    """Where a new document of this type lives, relative to the workspace."""
    file_name = CANONICAL_FILES.get(document_type) or f"{slugify(title)}.md"
    return f"{directory.rstrip('/')}/{file_name}" if directory else file_name
