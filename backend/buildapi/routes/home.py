"""
Build API — Landing Page
==========================

GET / returns a small HTML page confirming the service is up, listing the
aggregate endpoints and linking to the interactive docs at /api-docs.
"""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["Home"])

LANDING_PAGE = """
<html>
  <head>
    <title>Construction Aggregates API</title>
    <style>
      body {
        font-family: Arial, sans-serif;
        max-width: 800px;
        margin: 0 auto;
        padding: 20px;
        line-height: 1.6;
      }
      h1, h2 {
        color: #333;
      }
      .button {
        display: inline-block;
        padding: 10px 20px;
        margin-top: 20px;
        background-color: #4CAF50;
        color: white;
        text-decoration: none;
        border-radius: 4px;
        font-weight: bold;
      }
      .button:hover {
        background-color: #45a049;
      }
      code {
        background-color: #f4f4f4;
        padding: 2px 5px;
        border-radius: 3px;
      }
    </style>
  </head>
  <body>
    <h1>Construction Aggregates API</h1>
    <p>Your API for managing construction aggregate materials is running successfully.</p>
    <h2>Available Endpoints:</h2>
    <ul>
      <li><code>GET /api/aggregates</code> - List all aggregates</li>
      <li><code>GET /api/aggregates/:id</code> - Get a specific aggregate</li>
      <li><code>POST /api/aggregates</code> - Create a new aggregate</li>
      <li><code>PUT /api/aggregates/:id</code> - Update an existing aggregate</li>
      <li><code>DELETE /api/aggregates/:id</code> - Delete an aggregate</li>
    </ul>
    <a href="/api-docs" class="button">View API Documentation</a>
  </body>
</html>
"""


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def landing_page() -> HTMLResponse:
    return HTMLResponse(content=LANDING_PAGE)
