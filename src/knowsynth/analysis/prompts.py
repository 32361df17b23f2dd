"""Prompt templates sent to the generation backend."""

TOPICS_PROMPT = """Analyze all documents in the file store and extract the main topics and themes.

Provide a comprehensive list of topics, organized by:
1. Primary topics (most frequently mentioned)
2. Secondary topics (related or supporting topics)
3. Emerging topics (new or developing themes)

For each topic, provide:
- Topic name
- Frequency/importance
- Related documents (if document list is provided)
- Brief description

Format as a JSON array of topic objects with: {name, frequency, importance, description, relatedDocuments}"""

ACTION_ITEMS_PROMPT = """Extract all action items, tasks, and to-dos from documents in the file store.

For each action item, provide:
- Description
- Priority (if mentioned)
- Due date (if mentioned)
- Assignee (if mentioned)
- Related document
- Status (if mentioned)

Format as a JSON array of action item objects with: {description, priority, dueDate, assignee, document, status}"""

SUMMARIES_PROMPT = """Generate concise summaries for documents in the file store.

For each document, provide:
- Document title/name
- Main points (3-5 key points)
- Purpose/objective
- Key takeaways

Format as a JSON array of summary objects with: {documentName, title, mainPoints, purpose, takeaways}"""

RELATIONSHIPS_PROMPT = """Analyze relationships between documents in the file store.

Identify:
1. Documents that reference each other
2. Documents with similar topics or themes
3. Documents that are part of a sequence or workflow
4. Documents that build upon each other
5. Document clusters or groups

Format as a JSON array of relationship objects with: {document1, document2, relationshipType, strength, description}"""

TRENDS_PROMPT = """Analyze documents in the file store to detect trends over time.

Identify:
1. Topics that are increasing in frequency
2. Topics that are decreasing in frequency
3. New topics that have emerged
4. Topics that have become less relevant
5. Overall content evolution patterns

Format as JSON with: {increasingTopics, decreasingTopics, emergingTopics, decliningTopics, evolution}"""

SYNTHESIS_PROMPT = """Synthesize information from all documents in the file store(s) to answer the following query:

Query: {query}

Provide a comprehensive answer that:
1. Combines relevant information from multiple documents
2. Identifies patterns and connections
3. Highlights key insights
4. Notes any contradictions or gaps
5. Provides actionable conclusions

Format as a well-structured response with clear sections."""

INSIGHTS_PROMPT = """Analyze all documents in the file store(s) and provide comprehensive insights:

1. **Key Topics & Themes**: Identify the main topics and themes across all documents
2. **Document Relationships**: Identify how documents relate to each other
3. **Knowledge Gaps**: Identify areas where information might be missing or incomplete
4. **Trends & Patterns**: Identify any trends or patterns in the content
5. **Action Items**: Extract any action items or tasks mentioned
6. **Important Information**: Highlight the most important information

Format the response as a structured JSON object with the keys topics, relationships, knowledgeGaps, trends, actionItems and importantInfo. Be specific and actionable."""

RECOMMENDATIONS_PROMPT = """Based on all documents in the file store(s), provide proactive recommendations for improvement:

1. **Writing Style Improvements**: Suggest ways to improve writing consistency and quality
2. **Content Gaps**: Identify topics that should be covered but aren't
3. **Related Documents**: Suggest documents that should be reviewed together
4. **Action Items**: Highlight any pending action items
5. **Best Practices**: Suggest best practices based on the content patterns
{context}
Format as a JSON array of recommendation objects with: {{type, title, description, priority, actionItems}}"""

WRITING_STYLE_PROMPT = """Analyze the writing style of documents in the file store(s) and compare it with the following current text:

Current Text:
{current_text}

Provide:
1. **Style Consistency**: How well does the current text match the style of existing documents?
2. **Improvements**: Specific suggestions to make the text more consistent
3. **Tone Analysis**: Identify the tone of existing documents and suggest tone adjustments
4. **Formatting Suggestions**: Suggest formatting improvements based on document patterns

Format as JSON with: {{consistent, suggestions, tone, formatting}}"""

PATTERNS_PROMPT = """Analyze all documents in the file store(s) and detect patterns:

1. **Content Patterns**: Recurring topics, themes, or structures
2. **Writing Patterns**: Common writing styles, formats, or structures
3. **Temporal Patterns**: Changes over time (if dates are available)
4. **Relationship Patterns**: How documents typically relate to each other
5. **Usage Patterns**: Common workflows or processes mentioned

Format as JSON with: {contentPatterns, writingPatterns, temporalPatterns, relationshipPatterns, usagePatterns}"""

SUGGESTIONS_PROMPT = """Based on the knowledge in the file store(s) and the current work context, provide specific, actionable suggestions:

Current Context:
{context}

Provide suggestions for:
1. Relevant information from the knowledge base
2. Related documents to review
3. Best practices based on similar past work
4. Potential improvements or considerations
5. Missing information that should be included

Format as a JSON array of suggestion objects with: {{type, title, description, relevance, source}}"""

PRIORITIES_PROMPT = """Analyze the following tasks and assign priorities (high, medium, low) based on:
1. Urgency (due dates, deadlines)
2. Importance (impact on goals)
3. Dependencies (tasks that block others)
4. Context from the knowledge base

Tasks:
{tasks}

Return a JSON array with: [{{description, priority, reasoning}}]"""

ESTIMATES_PROMPT = """Based on similar work in the knowledge base, estimate time for these tasks:

Tasks:
{tasks}

For each task, provide:
- Estimated hours
- Complexity level (simple, moderate, complex)
- Factors affecting time

Return JSON array: [{{description, estimatedHours, complexity, factors}}]"""

WORKFLOW_TEMPLATE_PROMPT = """Based on documents in the knowledge base, generate a workflow template for: {workflow_type}

The template should include:
1. Steps/phases
2. Required resources or documents
3. Typical timeline
4. Key milestones
5. Common pitfalls to avoid

Format as JSON: {{name, description, steps: [{{name, description, order, estimatedTime}}], resources, timeline, milestones, tips}}"""

TASK_DOCUMENTS_PROMPT = """Based on the knowledge base, recommend relevant documents for this task:

Task: {task}

Provide:
- Document names/titles
- Why they're relevant
- Key information from each

Return JSON array: [{{documentName, relevance, keyInfo}}]"""

NOTES_SINGLE_SECTION_PROMPT = """Analyze the following documents and provide ONLY a {section} section. Focus exclusively on {section}. Do not include any other sections.

"""

NOTES_SECTIONS_PROMPT = """Analyze the following documents and generate notes with ONLY the following sections: {sections}. Do not include any other sections.

"""

NOTES_OPEN_PROMPT = """Analyze the following documents and provide insights.

"""

NOTES_BODY_PROMPT = """Format the output in a clear, structured way.

Documents to analyze:
{documents}"""

KEY_INSIGHTS_PROMPT = """Extract the most important insights, findings, and takeaways from the following documents.
Focus on actionable insights, surprising findings, and key learnings.
Format as a JSON object: {{"insights": ["..."]}}

Documents:
{documents}"""

NOTES_ACTION_ITEMS_PROMPT = """Extract all action items, tasks, and next steps from the following documents.
Include who should do what, deadlines if mentioned, and priorities.
Format as a JSON array of action item objects with: {{description, priority, dueDate, assignee, document, status}}

Documents:
{documents}"""

TOPIC_CLUSTERS_PROMPT = """Identify and cluster the main topics, themes, and subjects covered in the following documents.
Group related topics together and provide a brief description of each cluster.
Show which documents relate to which topics.
Format as a JSON array of cluster objects with: {{name, description, topics, documents}}

Documents:
{documents}"""

DOCUMENT_SYNTHESIS_PROMPT = """Synthesize information from the following documents.
Find common themes, connections, and insights across all documents.
Create a unified understanding that combines information from all sources.
Be comprehensive and highlight relationships between different documents.

Documents:
{documents}"""
