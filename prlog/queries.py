"""GraphQL documents sent to the GitHub API.

All values are passed as variables; nothing is interpolated into the text.
"""

HISTORY_QUERY = """
query History(
  $owner: String!
  $name: String!
  $branch: String!
  $since: GitTimestamp!
  $until: GitTimestamp!
  $first: Int!
) {
  repository(owner: $owner, name: $name) {
    refs(refPrefix: "refs/heads/", query: $branch, last: 1) {
      edges {
        node {
          target {
            ... on Commit {
              history(since: $since, until: $until, first: $first) {
                edges {
                  node {
                    author {
                      user {
                        login
                      }
                    }
                    message
                    authoredDate
                  }
                }
              }
            }
          }
        }
      }
    }
  }
}
"""

LABELS_QUERY = """
query Labels($owner: String!, $name: String!, $number: Int!, $first: Int!) {
  repository(owner: $owner, name: $name) {
    pullRequest(number: $number) {
      labels(first: $first) {
        edges {
          node {
            name
          }
        }
      }
    }
  }
}
"""

LATEST_RELEASE_QUERY = """
query LatestRelease($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) {
    latestRelease {
      tagCommit {
        committedDate
      }
    }
  }
}
"""
