"""Seed a starter first-aid catalog when the levels table is empty."""
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.badge import Badge
from app.models.level import Level
from app.models.scenario import Scenario, ScenarioStep

logger = logging.getLogger(__name__)

# Each step: (question, (A, B, C, D), correct label, feedback)
SEED_CATALOG = [
    {
        "title": "Basics",
        "description": "Check the scene, check the person, call for help.",
        "badge": ("First Responder", "Completed every Basics scenario with a perfect score.", "/badges/basics.png"),
        "scenarios": [
            {
                "title": "Someone collapses in the street",
                "description": "A passer-by falls to the ground in front of you.",
                "steps": [
                    ("What do you do first?",
                     ("Run to the person", "Check the scene is safe", "Call a friend", "Take a photo"),
                     "B", "Never become a second casualty: make sure the area is safe."),
                    ("The person does not respond to your voice. Next?",
                     ("Shake them hard", "Leave them alone", "Tap the shoulders and shout", "Give water"),
                     "C", None),
                    ("They do not respond. What now?",
                     ("Call emergency services", "Wait ten minutes", "Drive them home", "Search their bag"),
                     "A", None),
                ],
            },
            {
                "title": "Small cut in the kitchen",
                "description": "A friend cuts a finger while chopping vegetables.",
                "steps": [
                    ("How do you stop the bleeding?",
                     ("Blow on it", "Apply direct pressure with a clean cloth", "Rinse with alcohol", "Ignore it"),
                     "B", None),
                    ("Bleeding has stopped. Next step?",
                     ("Cover with a sterile dressing", "Apply butter", "Leave it open in the dirt", "Scratch it"),
                     "A", None),
                ],
            },
        ],
    },
    {
        "title": "Burns and bleeding",
        "description": "Cool burns and control serious bleeding.",
        "badge": ("Steady Hands", "Completed every Burns and bleeding scenario with a perfect score.", "/badges/burns.png"),
        "scenarios": [
            {
                "title": "Hot water burn",
                "description": "Boiling water spills on a child's arm.",
                "steps": [
                    ("How do you cool the burn?",
                     ("Ice cubes", "Cool running water for 20 minutes", "Toothpaste", "Butter"),
                     "B", "Cool running water limits tissue damage; ice can make it worse."),
                    ("A blister forms. Should you pop it?",
                     ("Yes", "Only with a needle", "No, cover it loosely", "Yes, then add salt"),
                     "C", None),
                ],
            },
            {
                "title": "Deep cut on the leg",
                "description": "A cyclist has a deep, heavily bleeding wound.",
                "steps": [
                    ("What do you do first?",
                     ("Apply firm direct pressure", "Give them food", "Remove the object stuck in the wound", "Elevate the head"),
                     "A", None),
                    ("Blood soaks through the dressing. Next?",
                     ("Remove it and start again", "Add another dressing on top and keep pressing", "Stop pressing", "Wash the wound"),
                     "B", None),
                ],
            },
        ],
    },
    {
        "title": "CPR",
        "description": "Recognise cardiac arrest and start chest compressions.",
        "badge": ("Lifesaver", "Completed every CPR scenario with a perfect score.", "/badges/cpr.png"),
        "scenarios": [
            {
                "title": "Adult not breathing",
                "description": "A colleague is unresponsive and not breathing normally.",
                "steps": [
                    ("Where do you place your hands?",
                     ("On the stomach", "Centre of the chest", "On the neck", "Left shoulder"),
                     "B", None),
                    ("At what rate do you compress?",
                     ("100 to 120 per minute", "20 per minute", "As fast as possible", "60 per minute"),
                     "A", None),
                    ("An AED arrives. What do you do?",
                     ("Ignore it", "Wait for paramedics", "Switch it on and follow the prompts", "Read the manual first"),
                     "C", None),
                ],
            },
        ],
    },
]


async def seed_catalog(db: AsyncSession) -> int:
    """Insert SEED_CATALOG if no level exists yet. Returns the number of levels created."""
    result = await db.execute(select(func.count(Level.id)))
    if result.scalar_one() > 0:
        return 0

    for order, level_data in enumerate(SEED_CATALOG, start=1):
        level = Level(
            title=level_data["title"],
            description=level_data["description"],
            difficulty_order=order,
        )
        db.add(level)
        await db.flush()

        name, description, icon_url = level_data["badge"]
        db.add(Badge(level_id=level.id, name=name, description=description, icon_url=icon_url))

        for scenario_data in level_data["scenarios"]:
            scenario = Scenario(
                level_id=level.id,
                title=scenario_data["title"],
                description=scenario_data["description"],
            )
            db.add(scenario)
            await db.flush()
            for step_order, (question, options, correct, feedback) in enumerate(scenario_data["steps"], start=1):
                db.add(ScenarioStep(
                    scenario_id=scenario.id,
                    step_order=step_order,
                    question_text=question,
                    option_a=options[0],
                    option_b=options[1],
                    option_c=options[2],
                    option_d=options[3],
                    correct_action=correct,
                    feedback_message=feedback,
                ))

    await db.commit()
    logger.info("seeded %s levels", len(SEED_CATALOG))
    return len(SEED_CATALOG)
