"""Prompt templates for turning feed items into markdown articles."""

SYSTEM_PROMPT = """You are a professional content curator and markdown writer. Turn every post or thread you are given into its own markdown article. Never merge several posts into one article."""

ARTICLE_PROMPT = """You are a professional technical content curator. Turn each of the threads below into a markdown article with this exact layout:

1. HEADER: "### " followed by ONE emoji (🤖 technical, 🚀 tools, 💡 tips, ✨ features) and a title such as "### 🤖 Observability - RAG Implementation".
2. INTRODUCTION: 2-3 sentences saying what the article covers. Professional tone, no emojis, no marketing language.
3. KEY POINTS: "Key Points:" then 3-5 bullets using "•", one line each, separated by blank lines.
4. IMPLEMENTATION (only when it applies): "🚀 Implementation:" then 3-5 numbered, action-oriented steps.
5. RESOURCES (omit when the thread has none): "🔗 Resources:" then "• [Tool Name](url) - description of at most 10 words" per link, and images as "![Image](url)" with no description.

Rules:
- Separate articles with a line containing only "---".
- Use only links and images that appear in the content. Never invent resources.
- Include every external link from a thread in its article.
- No bold or italic text, no extra sections, no placeholder content.
- Keep the original context of each thread; when it is thin, write a fuller introduction from your own knowledge of the topic.

Here is the content to transform:

{content}

Example of one article:

---
### 🤖 Observability, Evaluation, and RAG Implementation

This article outlines the difference between analytics and observability and the pieces needed for a Retrieval Augmented Generation system.

Key Points:

• Analytics provides high-level metrics like user counts and page views.

• Observability offers insight into individual requests and responses.

• A basic RAG system needs an inference provider and a vector database.

🚀 Implementation:
1. Choose an Inference Provider: Pick a service that hosts the model.
2. Select a Vector Database: Choose a store for embeddings.
3. Develop Retrieval Logic: Fetch the relevant context per query.

🔗 Resources:

• [Tool Name](https://example.com) - What this tool helps with

![Image](https://example.com/image.png)

Write one article per thread, {count} in total."""
