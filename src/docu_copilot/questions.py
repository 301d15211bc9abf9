from .models import Question

PRD_QUESTIONS = (
    Question(
        id="prd_problem",
        text="What problem does this product solve?",
        examples=(
            "Users struggle to manage their card collections efficiently",
            "Current solutions are too complex for casual collectors",
        ),
        category="problem",
        priority=1,
    ),
    Question(
        id="prd_users",
        text="Who are the target users for this product?",
        examples=(
            "Card game enthusiasts and collectors",
            "Small business owners selling trading cards",
        ),
        category="users",
        priority=2,
    ),
    Question(
        id="prd_solution",
        text="What is your proposed solution, and what makes it different from today's alternatives?",
        examples=(
            "A mobile app that scans cards and prices them automatically",
            "A marketplace with built-in condition grading",
        ),
        category="solution",
        priority=3,
    ),
    Question(
        id="prd_goals",
        text="What are the main goals and success criteria?",
        examples=(
            "Increase user engagement by 50%",
            "Reduce time to complete tasks by 30%",
        ),
        category="goals",
        priority=4,
    ),
    Question(
        id="prd_constraints",
        text="What constraints should we respect (timeline, budget, platforms, compliance)?",
        examples=(
            "Launch in 3 months with a team of two",
            "Must run on iOS and Android",
        ),
        required=False,
        category="constraints",
        priority=5,
    ),
)

REQUIREMENTS_QUESTIONS = (
    Question(
        id="req_functional",
        text="What are the key functional requirements?",
        examples=(
            "User authentication and authorization",
            "Inventory management system",
        ),
        category="functional",
        priority=1,
    ),
    Question(
        id="req_user_stories",
        text="Which user stories matter most? Use 'As a <role>, I want <goal>, so that <benefit>'.",
        examples=(
            "As a collector, I want to scan a card, so that I can log it without typing",
        ),
        category="user-story",
        priority=2,
    ),
    Question(
        id="req_acceptance",
        text="How will we know each story is done? List acceptance criteria (WHEN ... THEN ... SHALL ...).",
        examples=(
            "WHEN a scan fails THEN the system SHALL offer manual entry",
        ),
        category="acceptance",
        priority=3,
    ),
    Question(
        id="req_nonfunctional",
        text="What are the non-functional requirements (performance, security, etc.)?",
        examples=(
            "System must handle 1000 concurrent users",
            "Response time under 200ms",
        ),
        category="non-functional",
        priority=4,
    ),
)

DESIGN_QUESTIONS = (
    Question(
        id="design_architecture",
        text="What is the overall system architecture?",
        examples=(
            "Microservices with API gateway",
            "Monolithic web application",
        ),
        category="architecture",
        priority=1,
    ),
    Question(
        id="design_components",
        text="What are the main system components?",
        examples=(
            "User service, inventory service, payment service",
            "Frontend, backend API, database",
        ),
        category="components",
        priority=2,
    ),
    Question(
        id="design_data",
        text="What are the core data models and how do they relate?",
        examples=(
            "Card(id, set, condition) belongs to Collection(owner)",
        ),
        category="data",
        priority=3,
    ),
    Question(
        id="design_integration",
        text="Which external systems or APIs do you integrate with?",
        examples=(
            "Stripe for payments",
            "A pricing API for card valuations",
        ),
        required=False,
        category="integration",
        priority=4,
    ),
)

IMPLEMENTATION_QUESTIONS = (
    Question(
        id="spec_tasks",
        text="What are the main implementation tasks?",
        examples=(
            "Set up database schema",
            "Implement user authentication",
        ),
        category="tasks",
        priority=1,
    ),
    Question(
        id="spec_dependencies",
        text="Which tasks depend on others, and what is the critical path?",
        examples=(
            "Payments depend on authentication",
        ),
        category="dependencies",
        priority=2,
    ),
    Question(
        id="spec_timeline",
        text="What is the expected timeline?",
        examples=(
            "2 weeks for MVP",
            "3 months for full implementation",
        ),
        category="timeline",
        priority=3,
    ),
)

QUESTION_SETS = {
    "prd": PRD_QUESTIONS,
    "requirements": REQUIREMENTS_QUESTIONS,
    "design": DESIGN_QUESTIONS,
    "implementation": IMPLEMENTATION_QUESTIONS,
}

# Question category -> document section, per phase. "default" catches the rest.
SECTION_MAPS = {
    "prd": {
        "problem": "Problem Statement",
        "solution": "Solution Overview",
        "users": "User Personas",
        "goals": "Product Objectives",
        "success": "Success Metrics",
        "constraints": "Constraints",
        "default": "Product Details",
    },
    "requirements": {
        "user-story": "User Stories",
        "acceptance": "Acceptance Criteria",
        "functional": "Functional Requirements",
        "non-functional": "Non-Functional Requirements",
        "default": "Requirements",
    },
    "design": {
        "architecture": "System Architecture",
        "components": "Components",
        "data": "Data Models",
        "integration": "Integrations",
        "default": "Technical Design",
    },
    "implementation": {
        "tasks": "Implementation Tasks",
        "timeline": "Timeline",
        "resources": "Resource Planning",
        "dependencies": "Dependencies",
        "default": "Implementation Plan",
    },
}


def question_set_for(phase: str) -> tuple[Question, ...]:
    """Fixed question set for a phase, ordered by priority (lower first)."""
    return tuple(sorted(QUESTION_SETS.get(phase, ()), key=lambda q: q.priority))


def section_for(phase: str, category: str) -> str:
    section_map = SECTION_MAPS.get(phase, SECTION_MAPS["prd"])
    return section_map.get(category, section_map["default"])
