"""Prompt templates used by the agents.

Templates are plain ``str.format`` strings. Literal braces in the JSON
examples are doubled.
"""

INTENT_VOCABULARY = (
    "createDocument",
    "generateLearningPlan",
    "analyzeData",
    "createVisualization",
    "searchInformation",
    "generatePresentation",
    "generateHtmlPage",
    "generateDashboard",
    "generateMap",
    "saveContent",
    "shareContent",
)

INTENT_RECOGNITION_PROMPT = """You analyse requests from human rights defenders.

Request (language {language_code}): "{text}"

Classify the request into exactly one of these intents:
- createDocument: write a document, report or article
- generateLearningPlan: build a learning plan, course or training
- analyzeData: analyse a data set
- createVisualization: produce a chart or visualization
- searchInformation: answer a question or look something up
- generatePresentation: build a slide presentation
- generateHtmlPage: build a web page
- generateDashboard: build an interactive dashboard
- generateMap: build an interactive map
- saveContent: store previously generated content
- shareContent: share previously generated content

Reply with JSON only, in this shape:
{{
  "intent": "<one of the intents above>",
  "confidence": <number between 0 and 1>,
  "parameters": {{"topic": "...", "targetAudience": "...", "format": "..."}},
  "contentType": "<document|code|learning-path|presentation|map|html-page|dashboard>",
  "bestApproach": "<document|code|learning-path|combined>",
  "requiresFollowUp": <true|false>,
  "followUpQuestions": ["..."]
}}"""

FOLLOW_UP_ANALYSIS_PROMPT = """You continue a dialog with a human rights defender.

Original request: "{initial_query}"
Previous analysis: intent={intent}, parameters={parameters}, bestApproach={best_approach}
Last assistant message: "{last_message}"
User answer: "{user_response}"

Revise the analysis in light of the answer. Keep parameters the answer does
not change. Reply with JSON only, in the same shape as before:
{{
  "intent": "...",
  "confidence": <number between 0 and 1>,
  "parameters": {{}},
  "contentType": "...",
  "bestApproach": "<document|code|learning-path|combined>",
  "requiresFollowUp": <true|false>,
  "followUpQuestions": ["..."]
}}"""

FOLLOW_UP_RESPONSE_PROMPT = """You are a helpful assistant for human rights defenders.

The user said: "{user_response}"
Current understanding: intent={intent}, parameters={parameters}

Write a short, friendly reply (at most two sentences) that confirms what you
will do next{question_hint}. Answer in the user's language."""

INFORMATION_PROMPT = """Answer the following question for a human rights defender
concisely and factually. Answer in the language of the question.

Question: {text}"""

DOCUMENT_PROMPT = """Write a well structured markdown document.

Topic: {subject}
Target audience: {target_audience}
Language: {language}
Additional context: {context}

Start with a level one heading, then an introduction, the main sections and a
short conclusion. Reply with the markdown only."""

LEARNING_PATH_PROMPT = """Design a learning path.

Topic: {subject}
Difficulty: {difficulty}
Language: {language}

Reply with JSON only:
{{
  "description": "...",
  "modules": [
    {{"title": "...", "description": "...", "duration": "2 hours",
      "resources": ["..."], "activities": ["..."]}}
  ]
}}"""

VISUALIZATION_CODE_PROMPT = """Write {language} code that creates a visualization.

Purpose: {purpose}
Data description: {data_description}
Libraries to use: {libraries}

Return the complete code in a single ```{language} fenced block followed by a
short note on how to run it."""

DATA_ANALYSIS_CODE_PROMPT = """Write {language} code that performs a data analysis.

Purpose: {purpose}
Data description: {data_description}
Analysis steps: {analysis_steps}
Libraries to use: {libraries}

Return the complete code in a single ```{language} fenced block."""

DASHBOARD_PROMPT = """Build an interactive dashboard in {language}.

Purpose: {purpose}
Data description: {data_description}
Libraries to use: {libraries}
Complexity: {complexity}

Split the dashboard into components. For every component write a level two
heading with its name followed by one ```{language} fenced block."""

PRESENTATION_PROMPT = """Create a slide presentation as {format_description}.

Topic: {topic}
Target audience: {target_audience}
Style: {style_type}
Number of slides: {slide_count}
Complexity: {complexity}

Return the complete source in a single fenced block."""

MAP_PROMPT = """Create an interactive Leaflet map.

Purpose: {purpose}
Map type: {map_type}
Region: {region}
Data type: {data_type}
Complexity: {complexity}

Return three fenced blocks: ```html, ```css and ```javascript."""

HTML_PAGE_PROMPT = """Create a standalone web page.

Topic: {topic}
Page type: {page_type}
CSS framework: {style_framework}
Complexity: {complexity}
Include JavaScript: {include_js}

Return fenced blocks: ```html, ```css{js_hint}."""
