"""
Static story table. The site presents the first entry.
"""

from typing import Dict, List

from app.exceptions import StoryNotFoundError
from app.models.story_models import QuickPrompt, QuizQuestion, StoryData


MOSES_TEXT = """Now Moses kept the flock of Jethro his father in law, the priest of Midian: and he led the flock to the backside of the desert, and came to the mountain of God, even to Horeb.

And the angel of the LORD appeared unto him in a flame of fire out of the midst of a bush: and he looked, and, behold, the bush burned with fire, and the bush was not consumed. And Moses said, I will now turn aside, and see this great sight, why the bush is not burnt.

And when the LORD saw that he turned aside to see, God called unto him out of the midst of the bush, and said, Moses, Moses. And he said, Here am I. And he said, Draw not nigh hither: put off thy shoes from off thy feet, for the place whereon thou standest is holy ground.

Moreover he said, I am the God of thy father, the God of Abraham, the God of Isaac, and the God of Jacob. And Moses hid his face; for he was afraid to look upon God.

And the LORD said, I have surely seen the affliction of my people which are in Egypt, and have heard their cry by reason of their taskmasters; for I know their sorrows; and I am come down to deliver them out of the hand of the Egyptians, and to bring them up out of that land unto a good land and a large, unto a land flowing with milk and honey.

Come now therefore, and I will send thee unto Pharaoh, that thou mayest bring forth my people the children of Israel out of Egypt. And Moses said unto God, Who am I, that I should go unto Pharaoh? And he said, Certainly I will be with thee.

And God said unto Moses, I AM THAT I AM: and he said, Thus shalt thou say unto the children of Israel, I AM hath sent me unto you."""


MOSES_AI_CONTEXT = (
    "The passage is Exodus 3:1-14 (KJV), the calling of Moses at the burning bush on Mount Horeb. "
    "Moses, a fugitive shepherd in Midian for forty years, sees a bush that burns without being "
    "consumed. God calls him by name, declares the ground holy, reveals Himself as the God of "
    "Abraham, Isaac and Jacob, announces that He has seen the suffering of Israel in Egypt, and "
    "sends Moses to Pharaoh. Moses objects 'Who am I?' and receives the promise 'I will be with "
    "thee' and the divine name 'I AM THAT I AM'. Key themes: God's initiative in calling, holiness, "
    "compassion for the oppressed, human inadequacy answered by divine presence."
)


MOSES_QUIZ = [
    QuizQuestion(
        question="Whose flock was Moses keeping when he came to Horeb?",
        options=["Aaron's", "Jethro's", "Pharaoh's", "Abraham's"],
        answer_index=1,
        explanation="Exodus 3:1 - Moses kept the flock of Jethro his father in law, the priest of Midian.",
    ),
    QuizQuestion(
        question="What was unusual about the burning bush?",
        options=[
            "It burned without being consumed",
            "It burned with blue fire",
            "It grew while burning",
            "It burned only at night",
        ],
        answer_index=0,
        explanation="Exodus 3:2 - the bush burned with fire, and the bush was not consumed.",
    ),
    QuizQuestion(
        question="What did God tell Moses to remove?",
        options=["His cloak", "His staff", "His shoes", "His head covering"],
        answer_index=2,
        explanation="Exodus 3:5 - put off thy shoes from off thy feet, for the place is holy ground.",
    ),
    QuizQuestion(
        question="How did Moses answer when God called his name?",
        options=["Who are you?", "Here am I", "Speak, Lord", "I am afraid"],
        answer_index=1,
        explanation="Exodus 3:4 - And he said, Here am I.",
    ),
    QuizQuestion(
        question="What name did God reveal to Moses?",
        options=["The LORD of hosts", "The Most High", "I AM THAT I AM", "The Holy One of Israel"],
        answer_index=2,
        explanation="Exodus 3:14 - And God said unto Moses, I AM THAT I AM.",
    ),
]


stories: List[StoryData] = [
    StoryData(
        id="moses",
        title_prefix="The Calling of",
        title_highlight="Moses",
        chapter_ref="Exodus Chapter 3",
        reference="Exodus 3:1-14",
        theme="God meets us in the wilderness and calls us by name",
        background_image="https://images.unsplash.com/photo-1509316785289-025f5b846b35?auto=format&fit=crop&w=1920&q=80",
        ai_context=MOSES_AI_CONTEXT,
        text=MOSES_TEXT,
        quiz=MOSES_QUIZ,
    ),
]

_STORIES_BY_ID: Dict[str, StoryData] = {story.id: story for story in stories}


def get_story(story_id: str) -> StoryData:
    story = _STORIES_BY_ID.get(story_id)
    if story is None:
        raise StoryNotFoundError(f"Story '{story_id}' not found", error_code="STORY_NOT_FOUND")
    return story


def get_current_story() -> StoryData:
    """The site is dedicated to a single story: the first entry of the table."""
    return stories[0]


def quick_prompts(story: StoryData) -> List[QuickPrompt]:
    """Recommended topics shown beside the study companion."""
    return [
        QuickPrompt(
            key="meaning",
            label="Explain Meaning",
            prompt=f"Explain the theological significance of {story.reference}.",
        ),
        QuickPrompt(
            key="history",
            label="Historical Context",
            prompt="What is the historical and cultural context of this passage?",
        ),
        QuickPrompt(
            key="devotional",
            label="Daily Devotional",
            prompt="Write a short, encouraging devotional based on this passage.",
        ),
        QuickPrompt(
            key="application",
            label="Life Application",
            prompt="How can I apply the lessons from this story to my modern life?",
        ),
    ]
