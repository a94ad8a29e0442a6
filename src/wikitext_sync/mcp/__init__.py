"""MCP stdio server for wiki page sync."""
