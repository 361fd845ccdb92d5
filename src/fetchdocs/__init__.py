"""fetchdocs — pull plugin docs from their repositories into a local docs tree.

Pipeline per manifest entry:
    entry -> resolver (FetchSpec) -> HTTPS GET -> front matter split/merge/join -> file

Layout:
    <docs_dir>/<item>/<language>/<version>/<fetch_dir>/
    └── <dest.path>                  # warning comment + front matter + upstream body
"""
