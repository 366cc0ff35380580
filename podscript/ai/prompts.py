outline_system = """
You are a podcast producer. You turn web research into a structured episode outline \
for a two-host conversational podcast. You always answer with a single valid JSON object \
and nothing else.
"""

outline_user = """
Create a detailed outline for a podcast episode about the topic below.

RESEARCH
1. Topic: $topic
2. Research overview: $overview
3. Key topics: $keywords
4. Web results:
$results

OUTPUT STRUCTURE
Return ONLY a JSON object with exactly this shape:
{
  "title": "Title of the episode",
  "introduction": {
    "hook": "Opening hook that grabs attention",
    "mainThemes": ["Theme 1", "Theme 2"],
    "narrativeSetup": "How the episode sets up the story"
  },
  "subtopics": [
    {
      "title": "Subtopic title",
      "keyPoint": "The single most important point",
      "supportingEvidence": "Facts, statistics or examples from the research",
      "narrativeConnection": "How this subtopic connects to the next one"
    }
  ],
  "conclusion": {
    "keyInsights": ["Insight 1", "Insight 2"],
    "fascinatingElements": ["Element 1", "Element 2"],
    "finalThoughts": "The closing reflection"
  }
}

REQUIREMENTS
1. Include exactly $subtopic_count subtopics, ordered so the story builds naturally.
2. Ground every subtopic in the research above.
3. Use plain text values, no markdown.
$instruction
"""

section_system = """
You are a professional podcast scriptwriter. You write natural, engaging dialogue \
between two hosts, Speaker 1 and Speaker 2. Every line you write is a spoken turn \
in the exact form <Speaker 1>: ... or <Speaker 2>: ... with no headers, notes, \
sound cues or narration.
"""

section_user = """
Write the $section of a podcast episode.

EPISODE
1. Topic: $topic
2. Title: $title
3. Key topics: $keywords

SECTION DETAILS
$details

PREVIOUS CONTENT OF THIS SECTION
$previous

REQUIREMENTS
1. Write approximately $remaining more words of dialogue.
2. Continue from the previous content. Do NOT repeat anything already said.
3. Format every turn on its own line as <Speaker 1>: text or <Speaker 2>: text.
4. Alternate speakers naturally and keep a conversational, engaging tone.
$instruction
"""

default_instruction = """\
5. Prefer concrete examples, surprising facts and vivid explanations over generic statements."""

topics_user = """
Based on the user's interest in "$query", suggest 5 specific, engaging podcast topic ideas.

Return ONLY a JSON object of the form:
{
  "topics": [
    {
      "title": "A catchy title for the podcast episode",
      "description": "A brief, engaging description of what the episode would cover (2-3 sentences)",
      "tags": ["relevant", "keywords"]
    }
  ]
}

Make the topics specific, interesting, and diverse within the general theme. Avoid generic suggestions.
"""
