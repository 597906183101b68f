"""Bundled version table used when neither the cache nor the registry answers.

Refreshed by hand before each release.  Every package name that appears in a
generated manifest must have an entry here so offline generation always
produces installable ranges.
"""

from __future__ import annotations

FALLBACK_VERSIONS: dict[str, str] = {
    # Express core
    "express": "^4.21.2",
    "helmet": "^8.0.0",
    "cors": "^2.8.5",
    "dotenv": "^16.4.7",
    "zod": "^3.24.1",
    "@types/express": "^4.17.21",
    "@types/node": "^22.10.5",
    "@types/cors": "^2.8.17",
    "typescript": "^5.7.3",
    "tsx": "^4.19.2",
    # Testing and linting
    "jest": "^29.7.0",
    "@types/jest": "^29.5.14",
    "ts-jest": "^29.2.5",
    "supertest": "^7.0.0",
    "@types/supertest": "^6.0.2",
    "eslint": "^9.18.0",
    "@eslint/js": "^9.18.0",
    "typescript-eslint": "^8.20.0",
    "prettier": "^3.4.2",
    # Databases
    "@prisma/client": "^6.2.1",
    "prisma": "^6.2.1",
    "mongoose": "^8.9.3",
    "pg": "^8.13.1",
    "@types/pg": "^8.11.10",
    "mongodb": "^6.12.0",
    "better-sqlite3": "^11.8.1",
    "@types/better-sqlite3": "^7.6.12",
    # Auth
    "jsonwebtoken": "^9.0.2",
    "bcryptjs": "^2.4.3",
    "@types/jsonwebtoken": "^9.0.7",
    "@types/bcryptjs": "^2.4.6",
    # API docs
    "swagger-ui-express": "^5.0.1",
    "swagger-jsdoc": "^6.2.8",
    "@types/swagger-ui-express": "^4.1.6",
    "@types/swagger-jsdoc": "^6.0.4",
    # NestJS
    "@nestjs/common": "^10.4.15",
    "@nestjs/core": "^10.4.15",
    "@nestjs/platform-express": "^10.4.15",
    "@nestjs/config": "^3.3.0",
    "@nestjs/cli": "^10.0.0",
    "@nestjs/schematics": "^10.0.0",
    "@nestjs/testing": "^10.4.15",
    "@nestjs/mongoose": "^10.1.0",
    "@nestjs/passport": "^10.0.3",
    "@nestjs/jwt": "^10.2.0",
    "@nestjs/swagger": "^8.0.7",
    "class-validator": "^0.14.1",
    "class-transformer": "^0.5.1",
    "reflect-metadata": "^0.2.2",
    "rxjs": "^7.8.1",
    "ts-node": "^10.9.2",
    "ts-loader": "^9.5.1",
    "passport": "^0.7.0",
    "passport-jwt": "^4.0.1",
    "@types/passport-jwt": "^4.0.1",
    # React client (MERN)
    "react": "^18.3.1",
    "react-dom": "^18.3.1",
    "@types/react": "^18.3.18",
    "@types/react-dom": "^18.3.5",
    "vite": "^6.0.7",
    "@vitejs/plugin-react": "^4.3.4",
    "tailwindcss": "^4.0.0",
    "@tailwindcss/vite": "^4.0.0",
    "styled-components": "^6.1.14",
    # Root orchestration (MERN)
    "concurrently": "^9.1.2",
}

#: Range returned for a package nobody has heard of.
UNKNOWN_VERSION = "latest"
