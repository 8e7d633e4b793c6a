"""Integration clients: mocks/ for development, real_http/ for institutions."""
