import asyncio

from fastmcp import Client


async def main():
    async with Client("http://localhost:8000/mcp") as client:
        tools = await client.list_tools()

        print(f"Available tools ({len(tools)}):")
        for tool in tools:
            print(f"* **{tool.name}**: {tool.description}")

        result = await client.call_tool("search_articles", {"query": "ক্রিকেট"})
        print(result.content[0].text)

        result = await client.call_tool("trending_topics", {"limit": 5})
        print(result.content[0].text)


if __name__ == "__main__":
    asyncio.run(main())
